"""
Custom exceptions for the freelance marketplace core.

Exception Hierarchy:
    MarketplaceError (base)
    ├── ValidationError             - Missing/invalid input (caller fixes and resubmits)
    ├── DuplicateUsernameError      - Signup conflict
    ├── InvalidCredentialsError     - Authentication failure (no field detail)
    ├── NotFoundError
    │   ├── JobNotFoundError
    │   ├── NotificationNotFoundError
    │   └── PaymentIntentNotFoundError
    ├── JobNotOpenError             - Lost acceptance race (UI should refresh)
    ├── JobNotAcceptedError         - Payment attempted out of sequence
    ├── PaymentTimeoutError         - Simulated gateway exceeded its timeout
    └── StorageUnavailableError     - Durable write/load failed after retries

Usage:
    Every error here is recoverable. The HTTP layer maps each one to a JSON
    body using `code` and `status_code`; in-process callers catch
    MarketplaceError and retry with corrected input or refreshed state.
"""

from typing import Optional, Dict, Any


class MarketplaceError(Exception):
    """
    Base exception for all marketplace errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    code = "marketplace_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error body returned by the API."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# INPUT ERRORS
# =============================================================================

class ValidationError(MarketplaceError):
    """
    Missing or invalid input fields.

    The caller must fix the input and resubmit. `field` names the offending
    field when there is exactly one.
    """

    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details)
        self.field = field


class DuplicateUsernameError(MarketplaceError):
    """A user with this username already exists."""

    code = "duplicate_username"
    status_code = 409

    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken", {"username": username})
        self.username = username


class InvalidCredentialsError(MarketplaceError):
    """
    Authentication failed.

    The message never says whether the username or the secret was wrong,
    so callers cannot tell which usernames exist.
    """

    code = "invalid_credentials"
    status_code = 401

    def __init__(self):
        super().__init__("Invalid username or password")


# =============================================================================
# LOOKUP ERRORS
# =============================================================================

class NotFoundError(MarketplaceError):
    """Base class for unknown record ids."""

    code = "not_found"
    status_code = 404


class JobNotFoundError(NotFoundError):
    """No job exists with the given id."""

    code = "job_not_found"

    def __init__(self, job_id: Any):
        super().__init__(f"Job {job_id} not found", {"job_id": job_id})
        self.job_id = job_id


class NotificationNotFoundError(NotFoundError):
    """No notification exists with the given id."""

    code = "notification_not_found"

    def __init__(self, notification_id: Any):
        super().__init__(
            f"Notification {notification_id} not found",
            {"notification_id": notification_id},
        )
        self.notification_id = notification_id


class PaymentIntentNotFoundError(NotFoundError):
    """No payment intent exists with the given id (it may predate a restart)."""

    code = "payment_intent_not_found"

    def __init__(self, intent_id: str):
        super().__init__(
            f"Payment intent {intent_id} not found",
            {
                "intent_id": intent_id,
                "resolution": "Request a new payment for the notification",
            },
        )
        self.intent_id = intent_id


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================

class JobNotOpenError(MarketplaceError):
    """
    The job can no longer be accepted.

    Raised to every acceptance attempt after the first successful one, and to
    freelancers trying to accept a job reserved for someone else. This is an
    expected outcome of concurrent use: the UI should refresh its open-jobs list.
    """

    code = "job_not_open"
    status_code = 409

    def __init__(self, job_id: int, status: str, message: Optional[str] = None):
        super().__init__(
            message or f"Job {job_id} is no longer open (status: {status})",
            {"job_id": job_id, "status": status},
        )
        self.job_id = job_id
        self.status = status


class JobNotAcceptedError(MarketplaceError):
    """Payment was attempted for a job that has not been accepted."""

    code = "job_not_accepted"
    status_code = 409

    def __init__(self, job_id: int, status: str):
        super().__init__(
            f"Job {job_id} has not been accepted (status: {status})",
            {"job_id": job_id, "status": status},
        )
        self.job_id = job_id
        self.status = status


class PaymentTimeoutError(MarketplaceError):
    """
    The simulated payment gateway did not confirm in time.

    No state was changed; the caller should retry the confirmation.
    """

    code = "payment_timeout"
    status_code = 504

    def __init__(self, intent_id: str, timeout_seconds: float):
        super().__init__(
            f"Payment confirmation timed out after {timeout_seconds}s",
            {"intent_id": intent_id, "timeout_seconds": timeout_seconds, "resolution": "Retry"},
        )
        self.intent_id = intent_id
        self.timeout_seconds = timeout_seconds


# =============================================================================
# INFRASTRUCTURE ERRORS
# =============================================================================

class StorageUnavailableError(MarketplaceError):
    """
    A collection could not be durably read or written.

    Raised only after the bounded local retries are exhausted. The operation
    that triggered the write has NOT taken effect.
    """

    code = "storage_unavailable"
    status_code = 503

    def __init__(self, collection: str, attempts: int, reason: str = ""):
        super().__init__(
            f"Storage for '{collection}' unavailable after {attempts} attempt(s)",
            {"collection": collection, "attempts": attempts, "reason": reason},
        )
        self.collection = collection
        self.attempts = attempts
