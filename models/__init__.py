"""
Data models for the freelance marketplace.

This module contains immutable dataclasses for:
- Client / Freelancer: discriminated user records (identity store)
- FreelancerProfile: directory entry
- Job: a posted job and its Open -> Accepted -> Paid lifecycle
- Notification: a mailbox entry
- PaymentIntent: a pending or confirmed payment
- JobAccepted / PaymentConfirmed / DirectHireRequested: mailbox events

All records are frozen. State changes produce a new snapshot, which is
what gets written to the store, so no thread ever sees a half-updated record.
"""

from .user import (
    Client,
    Freelancer,
    FreelancerProfile,
    User,
    user_from_dict,
    ROLE_CLIENT,
    ROLE_FREELANCER,
)
from .job import Job, JobStatus, VALID_TRANSITIONS, can_transition
from .notification import Notification, NotificationKind
from .payment import PaymentIntent, PaymentStatus
from .events import JobAccepted, PaymentConfirmed, DirectHireRequested, MarketplaceEvent

__all__ = [
    # User models
    "Client",
    "Freelancer",
    "FreelancerProfile",
    "User",
    "user_from_dict",
    "ROLE_CLIENT",
    "ROLE_FREELANCER",
    # Job models
    "Job",
    "JobStatus",
    "VALID_TRANSITIONS",
    "can_transition",
    # Mailbox models
    "Notification",
    "NotificationKind",
    # Payment models
    "PaymentIntent",
    "PaymentStatus",
    # Events
    "JobAccepted",
    "PaymentConfirmed",
    "DirectHireRequested",
    "MarketplaceEvent",
]
