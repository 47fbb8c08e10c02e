"""
Payment intent model.

A PaymentIntent is created when a client asks to pay for an accepted job
from its "Job Accepted!" notification, and is confirmed once.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any


class PaymentStatus(Enum):
    """
    Status of a payment intent.

    Lifecycle:
        PENDING -> CONFIRMED
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class PaymentIntent:
    """A pending or confirmed payment for one job."""

    notification_id: int
    job_id: int
    payer: str
    payee: str
    amount: float
    status: PaymentStatus = PaymentStatus.PENDING
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def is_confirmed(self) -> bool:
        return self.status == PaymentStatus.CONFIRMED

    def confirmed(self) -> "PaymentIntent":
        return replace(self, status=PaymentStatus.CONFIRMED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "notification_id": self.notification_id,
            "job_id": self.job_id,
            "payer": self.payer,
            "payee": self.payee,
            "amount": self.amount,
            "status": self.status.value,
            "created_at": self.created_at,
        }
