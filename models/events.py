"""
Marketplace events.

The set of events is closed: each one maps to exactly one named handler in
MailboxService, and each delivery produces exactly one notification.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class JobAccepted:
    """A freelancer accepted a job. The poster is notified."""

    job_id: int
    client: str
    freelancer: str
    amount: float


@dataclass(frozen=True)
class PaymentConfirmed:
    """
    A client's payment was confirmed. The freelancer is notified.

    `notification_id` is the client's "Job Accepted!" notification that the
    payment was requested from; it is flipped to paid in the same write.
    """

    job_id: int
    notification_id: int
    client: str
    freelancer: str
    amount: float


@dataclass(frozen=True)
class DirectHireRequested:
    """A job was posted directly to one freelancer. That freelancer is notified."""

    job_id: int
    client: str
    freelancer: str
    amount: float


MarketplaceEvent = Union[JobAccepted, PaymentConfirmed, DirectHireRequested]
