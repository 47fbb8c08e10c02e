"""
Core module for the freelance marketplace.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- store: Durable keyed collections (users, jobs, notifications, freelancers)
"""

from .exceptions import (
    MarketplaceError,
    ValidationError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    NotFoundError,
    JobNotFoundError,
    NotificationNotFoundError,
    PaymentIntentNotFoundError,
    JobNotOpenError,
    JobNotAcceptedError,
    PaymentTimeoutError,
    StorageUnavailableError,
)
from .store import Collection, DataStore

__all__ = [
    "MarketplaceError",
    "ValidationError",
    "DuplicateUsernameError",
    "InvalidCredentialsError",
    "NotFoundError",
    "JobNotFoundError",
    "NotificationNotFoundError",
    "PaymentIntentNotFoundError",
    "JobNotOpenError",
    "JobNotAcceptedError",
    "PaymentTimeoutError",
    "StorageUnavailableError",
    "Collection",
    "DataStore",
]
