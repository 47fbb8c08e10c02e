"""Helper modules for the freelance marketplace."""

__all__ = [
    "pricing",
    "sanitize",
]
