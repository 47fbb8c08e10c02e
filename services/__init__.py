"""
Services layer for the freelance marketplace.

This module contains the business logic services:
- IdentityService: signup, authentication, profile edits (users)
- FreelancerDirectory: freelancer registry and search (freelancers)
- MailboxService: event -> notification fan-out, inboxes (notifications)
- JobService: Open -> Accepted -> Paid state machine (jobs)
- PaymentService: payment intents and idempotent confirmation
- Marketplace: the boundary facade used by the presentation layer

Each collection has exactly one writing service.
"""

from .directory_service import FreelancerDirectory
from .identity_service import IdentityService
from .mailbox_service import MailboxService
from .job_service import JobService
from .payment_service import PaymentService, PaymentGatewayStub
from .marketplace import Marketplace

__all__ = [
    "FreelancerDirectory",
    "IdentityService",
    "MailboxService",
    "JobService",
    "PaymentService",
    "PaymentGatewayStub",
    "Marketplace",
]
