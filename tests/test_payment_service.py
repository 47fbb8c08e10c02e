"""
Unit tests for payment requests and idempotent confirmation.
"""

import threading
import pytest
from unittest.mock import patch

from core.exceptions import (
    JobNotAcceptedError,
    NotificationNotFoundError,
    PaymentIntentNotFoundError,
    PaymentTimeoutError,
    StorageUnavailableError,
    ValidationError,
)
from core.store import DataStore
from models.job import JobStatus
from models.payment import PaymentStatus
from services.marketplace import Marketplace
from services.payment_service import PaymentGatewayStub
from conftest import CLIENT_PROFILE, FREELANCER_PROFILE


# Fixtures

@pytest.fixture
def accepted_job(populated_market):
    """Job accepted by bob; returns (job_id, notification_id)."""
    job_id = populated_market.post_job("alice", "content", "high", 5, "Three blog posts")
    populated_market.accept_job(job_id, "bob")
    notification = populated_market.get_inbox("alice")[0]
    return job_id, notification.id


def payment_received(market, username):
    return [n for n in market.get_inbox(username) if n.title == "Payment Received"]


# End-to-end

class TestPaymentFlow:
    """Post -> accept -> request -> confirm."""

    def test_end_to_end(self, populated_market, accepted_job):
        job_id, notification_id = accepted_job

        intent = populated_market.request_payment(notification_id)
        assert intent.amount == pytest.approx(375.0)
        assert intent.payer == "alice"
        assert intent.payee == "bob"
        assert intent.status == PaymentStatus.PENDING

        assert populated_market.confirm_payment(intent.id) is True

        assert populated_market.get_job(job_id).status == JobStatus.PAID

        client_notification = populated_market.mailbox.get_notification(notification_id)
        assert client_notification.is_paid is True
        assert client_notification.is_pending_payment is False

        received = payment_received(populated_market, "bob")
        assert len(received) == 1
        assert received[0].amount == pytest.approx(375.0)
        assert received[0].is_actionable is False
        assert "375.00" in received[0].body

        assert populated_market.payments.get_intent(intent.id).is_confirmed

    def test_unpaid_total(self, populated_market, accepted_job):
        _, notification_id = accepted_job
        assert populated_market.mailbox.unpaid_total("alice") == pytest.approx(375.0)

        intent = populated_market.request_payment(notification_id)
        populated_market.confirm_payment(intent.id)

        assert populated_market.mailbox.unpaid_total("alice") == 0


# Idempotence

class TestIdempotentConfirmation:
    """A payment is delivered at most once."""

    def test_double_confirm_same_intent(self, populated_market, accepted_job):
        _, notification_id = accepted_job
        intent = populated_market.request_payment(notification_id)

        assert populated_market.confirm_payment(intent.id) is True
        assert populated_market.confirm_payment(intent.id) is False

        assert len(payment_received(populated_market, "bob")) == 1

    def test_second_intent_for_same_notification(self, populated_market, accepted_job):
        _, notification_id = accepted_job
        first = populated_market.request_payment(notification_id)
        second = populated_market.request_payment(notification_id)

        assert populated_market.confirm_payment(first.id) is True
        assert populated_market.confirm_payment(second.id) is False

        assert len(payment_received(populated_market, "bob")) == 1

    def test_concurrent_confirmation(self, populated_market, accepted_job):
        _, notification_id = accepted_job
        intents = [populated_market.request_payment(notification_id) for _ in range(6)]
        barrier = threading.Barrier(len(intents))
        results = []
        lock = threading.Lock()

        def confirm(intent_id):
            barrier.wait()
            outcome = populated_market.confirm_payment(intent_id)
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=confirm, args=(i.id,)) for i in intents]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert results.count(False) == len(intents) - 1
        assert len(payment_received(populated_market, "bob")) == 1


# Failure cases

class TestPaymentErrors:
    """Invalid payment requests and confirmations."""

    def test_unknown_notification(self, populated_market):
        with pytest.raises(NotificationNotFoundError):
            populated_market.request_payment(999)

    def test_unknown_intent(self, populated_market):
        with pytest.raises(PaymentIntentNotFoundError):
            populated_market.confirm_payment("no-such-intent")

    def test_non_actionable_notification(self, populated_market, accepted_job):
        _, notification_id = accepted_job
        intent = populated_market.request_payment(notification_id)
        populated_market.confirm_payment(intent.id)
        received = payment_received(populated_market, "bob")[0]

        with pytest.raises(ValidationError):
            populated_market.request_payment(received.id)

    def test_request_on_paid_notification(self, populated_market, accepted_job):
        _, notification_id = accepted_job
        intent = populated_market.request_payment(notification_id)
        populated_market.confirm_payment(intent.id)

        with pytest.raises(ValidationError):
            populated_market.request_payment(notification_id)

    def test_job_not_accepted(self, populated_market, accepted_job):
        """Confirmation against a job that is no longer ACCEPTED is rejected."""
        job_id, notification_id = accepted_job
        intent = populated_market.request_payment(notification_id)

        # Force the job back to OPEN behind the service's back
        job = populated_market.get_job(job_id)
        record = job.to_dict()
        record.update(status="open", accepted_by=None, accepted_at=None)
        populated_market.store.jobs.put(job_id, record)

        with pytest.raises(JobNotAcceptedError):
            populated_market.confirm_payment(intent.id)

        with pytest.raises(JobNotAcceptedError):
            populated_market.request_payment(notification_id)

        assert payment_received(populated_market, "bob") == []


# Gateway

class TestGatewayTimeout:
    """A slow gateway times out before any state changes."""

    @pytest.fixture
    def slow_market(self):
        gateway = PaymentGatewayStub(delay_seconds=0.2, timeout_seconds=0.05)
        market = Marketplace.from_store(DataStore.in_memory(), gateway=gateway)
        market.register_user(dict(CLIENT_PROFILE))
        market.register_user(dict(FREELANCER_PROFILE))
        return market

    def test_timeout_leaves_state_unchanged(self, slow_market):
        job_id = slow_market.post_job("alice", "web", "low", 1, "Quick fix")
        slow_market.accept_job(job_id, "bob")
        notification_id = slow_market.get_inbox("alice")[0].id
        intent = slow_market.request_payment(notification_id)

        with pytest.raises(PaymentTimeoutError):
            slow_market.confirm_payment(intent.id)

        assert slow_market.get_job(job_id).status == JobStatus.ACCEPTED
        assert slow_market.mailbox.get_notification(notification_id).is_paid is False
        assert payment_received(slow_market, "bob") == []
        assert not slow_market.payments.get_intent(intent.id).is_confirmed

        # Gateway recovers, retry completes
        slow_market.payments._gateway.delay_seconds = 0.0
        assert slow_market.confirm_payment(intent.id) is True

    def test_delay_within_timeout(self):
        gateway = PaymentGatewayStub(delay_seconds=0.01, timeout_seconds=1.0)
        market = Marketplace.from_store(DataStore.in_memory(), gateway=gateway)
        market.register_user(dict(CLIENT_PROFILE))
        market.register_user(dict(FREELANCER_PROFILE))

        job_id = market.post_job("alice", "web", "low", 1, "Quick fix")
        market.accept_job(job_id, "bob")
        intent = market.request_payment(market.get_inbox("alice")[0].id)

        assert market.confirm_payment(intent.id) is True


# Recovery

class TestPartialFailureRecovery:
    """A retry completes a confirmation that failed half way."""

    def test_retry_after_notification_write_fails(self, populated_market, accepted_job):
        job_id, notification_id = accepted_job
        intent = populated_market.request_payment(notification_id)
        failure = StorageUnavailableError("notifications", 3, "disk full")

        with patch.object(populated_market.store.notifications, "put_many", side_effect=failure):
            with pytest.raises(StorageUnavailableError):
                populated_market.confirm_payment(intent.id)

        # Job already PAID, notification still unpaid, nothing delivered
        assert populated_market.get_job(job_id).status == JobStatus.PAID
        assert populated_market.mailbox.get_notification(notification_id).is_paid is False
        assert payment_received(populated_market, "bob") == []
        assert not populated_market.payments.get_intent(intent.id).is_confirmed

        assert populated_market.confirm_payment(intent.id) is True

        assert populated_market.mailbox.get_notification(notification_id).is_paid is True
        assert len(payment_received(populated_market, "bob")) == 1
        assert populated_market.payments.get_intent(intent.id).is_confirmed

        assert populated_market.confirm_payment(intent.id) is False
        assert len(payment_received(populated_market, "bob")) == 1
