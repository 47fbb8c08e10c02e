"""
Mailbox notification model.

Notifications are created by lifecycle and payment events and are never
deleted. The only mutation is flipping `is_paid` on an actionable
"Job Accepted!" notification once its payment is confirmed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional


class NotificationKind(Enum):
    """What produced the notification."""

    JOB_ACCEPTED = "job_accepted"
    PAYMENT_RECEIVED = "payment_received"
    DIRECT_HIRE = "direct_hire"


@dataclass(frozen=True)
class Notification:
    """A single mailbox entry for one recipient."""

    id: int
    """Unique, monotonically assigned id (higher = newer)."""

    recipient: str
    """Username of the mailbox owner."""

    kind: NotificationKind
    title: str
    body: str

    is_actionable: bool = False
    """True if the recipient can act on it (pay for an accepted job)."""

    related_job_id: Optional[int] = None
    amount: Optional[float] = None

    is_paid: Optional[bool] = None
    """Payment state for actionable notifications, None otherwise."""

    sender: Optional[str] = None
    """Username of the other party (e.g. the accepting freelancer)."""

    created_at: str = ""

    @property
    def is_pending_payment(self) -> bool:
        return self.is_actionable and self.is_paid is False

    def mark_paid(self) -> "Notification":
        """Return the paid snapshot of this notification."""
        return replace(self, is_paid=True)

    @classmethod
    def create(
        cls,
        notification_id: int,
        recipient: str,
        kind: NotificationKind,
        title: str,
        body: str,
        is_actionable: bool = False,
        related_job_id: Optional[int] = None,
        amount: Optional[float] = None,
        sender: Optional[str] = None,
    ) -> "Notification":
        """Create a new notification stamped with the current time."""
        return cls(
            id=notification_id,
            recipient=recipient,
            kind=kind,
            title=title,
            body=body,
            is_actionable=is_actionable,
            related_job_id=related_job_id,
            amount=amount,
            is_paid=False if is_actionable else None,
            sender=sender,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and JSON responses."""
        return {
            "id": self.id,
            "recipient": self.recipient,
            "kind": self.kind.value,
            "title": self.title,
            "body": self.body,
            "is_actionable": self.is_actionable,
            "related_job_id": self.related_job_id,
            "amount": self.amount,
            "is_paid": self.is_paid,
            "sender": self.sender,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        """Create from a stored dictionary."""
        related = data.get("related_job_id")
        return cls(
            id=int(data["id"]),
            recipient=data.get("recipient", ""),
            kind=NotificationKind(data.get("kind", "job_accepted")),
            title=data.get("title", ""),
            body=data.get("body", ""),
            is_actionable=data.get("is_actionable", False),
            related_job_id=int(related) if related is not None else None,
            amount=data.get("amount"),
            is_paid=data.get("is_paid"),
            sender=data.get("sender"),
            created_at=data.get("created_at", ""),
        )
