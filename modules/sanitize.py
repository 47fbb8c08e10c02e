"""Free-text input cleaning."""

from typing import Any, Optional

import bleach


def sanitize_text(text: Any, max_length: Optional[int] = None) -> str:
    """Strip HTML tags and surrounding whitespace, then truncate."""
    if not text or not isinstance(text, str):
        return ""
    text = text.strip()
    text = bleach.clean(text, tags=[], strip=True)
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text
