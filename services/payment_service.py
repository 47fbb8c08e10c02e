"""
Payment confirmation service.

A client pays for an accepted job from its "Job Accepted!" notification:

    1. request_payment(notification_id) -> PaymentIntent (PENDING)
    2. confirm_payment(intent_id)
         - simulated gateway confirms (optional delay, bounded by a timeout)
         - job ACCEPTED -> PAID
         - notification flipped to paid + freelancer notified (one write)

IDEMPOTENCE:
    confirm_payment() runs under the job's lock and is effective at most
    once per notification. A repeat (same intent, another intent for the
    same notification, or a concurrent duplicate) is a no-op that returns
    False. It never raises and never produces a second "Payment Received".

    The durable job/notification records carry the paid state, so a retry
    after a partial failure completes whatever step is missing.

Payment intents live in memory only; after a restart the client simply
requests a new one.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from core.exceptions import (
    JobNotAcceptedError,
    PaymentIntentNotFoundError,
    PaymentTimeoutError,
    ValidationError,
)
from models.events import PaymentConfirmed
from models.job import JobStatus
from models.payment import PaymentIntent
from services.job_service import JobService
from services.mailbox_service import MailboxService
from logging_config import get_logger, get_job_logger


# Module logger
logger = get_logger(__name__)


class PaymentGatewayStub:
    """
    Simulated payment gateway. No money moves.

    Confirmation takes `delay_seconds` (zero by default). If that exceeds
    `timeout_seconds` the wait is cut off at the timeout and
    PaymentTimeoutError raised, before any marketplace state changes.
    """

    def __init__(self, delay_seconds: float = 0.0, timeout_seconds: float = 10.0):
        self.delay_seconds = max(0.0, delay_seconds)
        self.timeout_seconds = timeout_seconds
        self._sleeper = threading.Event()

    def confirm(self, intent: PaymentIntent) -> None:
        """
        Raises:
            PaymentTimeoutError: If the simulated delay exceeds the timeout
        """
        if self.delay_seconds > 0:
            # Event is never set; wait() is an interruptible sleep
            self._sleeper.wait(min(self.delay_seconds, self.timeout_seconds))

        if self.delay_seconds > self.timeout_seconds:
            logger.warning(
                f"Gateway timed out confirming intent {intent.id[:8]} "
                f"({self.delay_seconds}s > {self.timeout_seconds}s)"
            )
            raise PaymentTimeoutError(intent.id, self.timeout_seconds)

        logger.debug(f"Gateway confirmed intent {intent.id[:8]} for {intent.amount:.2f}")


class PaymentService:
    """Creates and confirms payment intents."""

    def __init__(
        self,
        jobs: JobService,
        mailbox: MailboxService,
        gateway: Optional[PaymentGatewayStub] = None,
    ):
        self._jobs = jobs
        self._mailbox = mailbox
        self._gateway = gateway or PaymentGatewayStub()

        self._intents: Dict[str, PaymentIntent] = {}
        self._intents_lock = threading.Lock()

        logger.info("PaymentService initialized")

    def request_payment(self, notification_id: int) -> PaymentIntent:
        """
        Create a payment intent from a pending actionable notification.

        Raises:
            NotificationNotFoundError: Unknown notification
            ValidationError: Not actionable, not tied to a job, or already paid
            JobNotFoundError: The related job is missing
            JobNotAcceptedError: The related job is not ACCEPTED
        """
        notification = self._mailbox.get_notification(notification_id)

        if not notification.is_actionable or notification.related_job_id is None:
            raise ValidationError(
                f"Notification {notification.id} does not request a payment",
                field="notification_id",
            )
        if notification.is_paid:
            raise ValidationError(
                f"Notification {notification.id} is already paid",
                field="notification_id",
            )

        job = self._jobs.get_job(notification.related_job_id)
        if job.status != JobStatus.ACCEPTED:
            raise JobNotAcceptedError(job.id, job.status.value)

        intent = PaymentIntent(
            notification_id=notification.id,
            job_id=job.id,
            payer=job.posted_by,
            payee=job.accepted_by,
            amount=job.price,
        )
        with self._intents_lock:
            self._intents[intent.id] = intent

        get_job_logger(job.id).info(
            f"Payment requested by {intent.payer}: intent {intent.id[:8]}, "
            f"amount {job.display_price:.2f}"
        )
        return intent

    def get_intent(self, intent_id: str) -> PaymentIntent:
        """
        Raises:
            PaymentIntentNotFoundError: Unknown (or pre-restart) intent
        """
        with self._intents_lock:
            intent = self._intents.get(intent_id)
        if intent is None:
            raise PaymentIntentNotFoundError(intent_id)
        return intent

    def confirm_payment(self, intent_id: str) -> bool:
        """
        Confirm a payment intent.

        Returns:
            True on the first effective confirmation, False if the payment
            had already been confirmed (no state change, no event)

        Raises:
            PaymentIntentNotFoundError: Unknown intent
            JobNotAcceptedError: The job is not ACCEPTED (or PAID)
            PaymentTimeoutError: Gateway too slow; nothing changed, retry
            StorageUnavailableError: A write failed; retry to complete
        """
        intent = self.get_intent(intent_id)
        job_logger = get_job_logger(intent.job_id)

        with self._jobs.job_lock(intent.job_id):
            intent = self.get_intent(intent_id)
            if intent.is_confirmed:
                job_logger.info(f"Intent {intent.id[:8]} already confirmed, no-op")
                return False

            job = self._jobs.get_job(intent.job_id)
            if job.status == JobStatus.OPEN:
                raise JobNotAcceptedError(job.id, job.status.value)

            notification = self._mailbox.get_notification(intent.notification_id)
            if notification.is_paid:
                job_logger.info(
                    f"Notification {notification.id} already paid, intent "
                    f"{intent.id[:8]} is a no-op"
                )
                self._store_intent(intent.confirmed())
                return False

            self._gateway.confirm(intent)

            self._jobs.mark_paid(job.id)
            delivered = self._mailbox.publish(PaymentConfirmed(
                job_id=job.id,
                notification_id=notification.id,
                client=intent.payer,
                freelancer=intent.payee,
                amount=intent.amount,
            ))
            self._store_intent(intent.confirmed())

        job_logger.info(f"Payment confirmed: intent {intent.id[:8]}, {intent.amount:.2f}")
        return delivered is not None

    def _store_intent(self, intent: PaymentIntent) -> None:
        with self._intents_lock:
            self._intents[intent.id] = intent
