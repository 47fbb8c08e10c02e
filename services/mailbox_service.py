"""
Per-user notification mailbox.

MailboxService converts marketplace events into notifications. The set of
events is closed, so dispatch goes through a fixed table of named handlers
rather than an open subscriber list:

    JobAccepted          -> poster gets "Job Accepted!" (actionable, amount = price)
    PaymentConfirmed     -> freelancer gets "Payment Received" (amount paid)
    DirectHireRequested  -> freelancer gets "New Direct Hire Request"

Exactly-once delivery:
    PaymentConfirmed flips the client's notification to paid AND appends the
    freelancer's notification in ONE durable write, and only if the client's
    notification was still unpaid. A repeated or concurrent confirmation
    therefore finds it already paid and writes nothing.

Inbox reads never mutate state. Recipients are matched on username only.

Usage:
    mailbox = MailboxService(store.notifications, identity)
    mailbox.publish(JobAccepted(job_id=1, client="alice", freelancer="bob", amount=375.0))
    inbox = mailbox.get_inbox("alice")   # newest first
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Type

from core.exceptions import NotificationNotFoundError
from core.store import Collection
from models.events import (
    DirectHireRequested,
    JobAccepted,
    MarketplaceEvent,
    PaymentConfirmed,
)
from models.notification import Notification, NotificationKind
from modules.pricing import display_price
from services.identity_service import IdentityService
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class MailboxService:
    """
    Notification store and event fan-out (sole writer of `notifications`).

    Thread Safety:
        Only PaymentConfirmed takes the mailbox lock, so its paid-check and
        write are atomic. The other handlers append new notifications and rely
        on the collection's own write lock, so deliveries for unrelated jobs
        never queue behind each other. Reads use the lock-free snapshot.
    """

    def __init__(self, collection: Collection, identity: IdentityService):
        self._collection = collection
        self._identity = identity
        self._lock = threading.Lock()

        self._handlers: Dict[Type, Callable[..., Optional[Notification]]] = {
            JobAccepted: self._on_job_accepted,
            PaymentConfirmed: self._on_payment_confirmed,
            DirectHireRequested: self._on_direct_hire_requested,
        }

    # =========================================================================
    # EVENT DELIVERY
    # =========================================================================

    def publish(self, event: MarketplaceEvent) -> Optional[Notification]:
        """
        Deliver an event as a notification.

        Returns:
            The created notification, or None if the event had already been
            delivered (repeat PaymentConfirmed)

        Raises:
            TypeError: If the event type has no handler
            StorageUnavailableError: If the notification could not be written
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"No mailbox handler for {type(event).__name__}")

        return handler(event)

    def _on_job_accepted(self, event: JobAccepted) -> Notification:
        freelancer = self._identity.get_user(event.freelancer)
        name = freelancer.name if freelancer else event.freelancer
        contact = freelancer.contact if freelancer else event.freelancer

        notification = Notification.create(
            notification_id=self._collection.allocate_id(),
            recipient=event.client,
            kind=NotificationKind.JOB_ACCEPTED,
            title="Job Accepted!",
            body=(
                f"{name} accepted your job #{event.job_id}. "
                f"Contact: {contact}. Amount due: ${display_price(event.amount):.2f}"
            ),
            is_actionable=True,
            related_job_id=event.job_id,
            amount=event.amount,
            sender=event.freelancer,
        )
        self._collection.put(notification.id, notification.to_dict())

        logger.info(
            f"Notified {event.client}: job #{event.job_id} accepted by {event.freelancer}"
        )
        return notification

    def _on_payment_confirmed(self, event: PaymentConfirmed) -> Optional[Notification]:
        with self._lock:
            return self._deliver_payment(event)

    def _deliver_payment(self, event: PaymentConfirmed) -> Optional[Notification]:
        origin = self.get_notification(event.notification_id)
        if origin.is_paid:
            logger.info(
                f"Payment for job #{event.job_id} already delivered "
                f"(notification {origin.id}), skipping"
            )
            return None

        client = self._identity.get_user(event.client)
        client_name = client.name if client else event.client

        notification = Notification.create(
            notification_id=self._collection.allocate_id(),
            recipient=event.freelancer,
            kind=NotificationKind.PAYMENT_RECEIVED,
            title="Payment Received",
            body=(
                f"{client_name} paid ${display_price(event.amount):.2f} "
                f"for job #{event.job_id}"
            ),
            is_actionable=False,
            related_job_id=event.job_id,
            amount=event.amount,
            sender=event.client,
        )

        # Flip + deliver in one durable write
        self._collection.put_many({
            origin.id: origin.mark_paid().to_dict(),
            notification.id: notification.to_dict(),
        })

        logger.info(
            f"Notified {event.freelancer}: payment of {display_price(event.amount):.2f} "
            f"for job #{event.job_id}"
        )
        return notification

    def _on_direct_hire_requested(self, event: DirectHireRequested) -> Notification:
        client = self._identity.get_user(event.client)
        client_name = client.name if client else event.client

        notification = Notification.create(
            notification_id=self._collection.allocate_id(),
            recipient=event.freelancer,
            kind=NotificationKind.DIRECT_HIRE,
            title="New Direct Hire Request",
            body=(
                f"{client_name} posted job #{event.job_id} for you "
                f"(${display_price(event.amount):.2f})"
            ),
            is_actionable=False,
            related_job_id=event.job_id,
            amount=event.amount,
            sender=event.client,
        )
        self._collection.put(notification.id, notification.to_dict())

        logger.info(f"Notified {event.freelancer}: direct hire job #{event.job_id}")
        return notification

    # =========================================================================
    # READS
    # =========================================================================

    def get_inbox(self, username: str) -> List[Notification]:
        """Return a user's notifications, newest first."""
        inbox = [
            Notification.from_dict(record)
            for record in self._collection.values()
            if record.get("recipient") == username
        ]
        inbox.sort(key=lambda n: n.id, reverse=True)
        return inbox

    def get_notification(self, notification_id: int) -> Notification:
        """
        Raises:
            NotificationNotFoundError: If no such notification exists
        """
        record = self._collection.get(notification_id)
        if record is None:
            raise NotificationNotFoundError(notification_id)
        return Notification.from_dict(record)

    def unpaid_total(self, username: str) -> float:
        """Sum of amounts the user still owes on accepted jobs."""
        return sum(
            n.amount or 0.0 for n in self.get_inbox(username) if n.is_pending_payment
        )
