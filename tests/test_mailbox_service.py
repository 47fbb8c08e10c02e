"""
Unit tests for the mailbox.
"""

import threading
import pytest

from core.exceptions import NotificationNotFoundError
from models.events import DirectHireRequested, JobAccepted


class TestInbox:
    """Inbox reads."""

    def test_empty_inbox(self, populated_market):
        assert populated_market.get_inbox("alice") == []

    def test_unknown_user_has_empty_inbox(self, populated_market):
        assert populated_market.get_inbox("nobody") == []

    def test_newest_first(self, populated_market):
        ids = [
            populated_market.post_job("alice", "web", "low", h, f"Job {h}")
            for h in (1, 2, 3)
        ]
        for job_id in ids:
            populated_market.accept_job(job_id, "bob")

        inbox = populated_market.get_inbox("alice")
        assert [n.related_job_id for n in inbox] == list(reversed(ids))
        assert [n.id for n in inbox] == sorted((n.id for n in inbox), reverse=True)

    def test_reads_do_not_mutate(self, populated_market):
        job_id = populated_market.post_job("alice", "web", "low", 1, "Job")
        populated_market.accept_job(job_id, "bob")

        first = populated_market.get_inbox("alice")
        second = populated_market.get_inbox("alice")

        assert first == second
        assert first[0].is_paid is False

    def test_matched_by_username_not_display_name(self, populated_market):
        """Two users sharing a display name get separate inboxes."""
        populated_market.register_user({
            "username": "alice2", "password": "pw-alice2",
            "name": "Alice Client", "role": "client",
        })
        job_id = populated_market.post_job("alice", "web", "low", 1, "Job")
        populated_market.accept_job(job_id, "bob")

        assert len(populated_market.get_inbox("alice")) == 1
        assert populated_market.get_inbox("alice2") == []


class TestNotificationContent:
    """What the events turn into."""

    def test_job_accepted_body(self, populated_market):
        job_id = populated_market.post_job("alice", "content", "high", 5, "Posts")
        populated_market.accept_job(job_id, "bob")

        notification = populated_market.get_inbox("alice")[0]
        assert notification.sender == "bob"
        assert "Bob Builder" in notification.body
        assert "bob@example.com" in notification.body
        assert "Amount due: $375.00" in notification.body

    def test_unknown_event_type(self, populated_market):
        with pytest.raises(TypeError):
            populated_market.mailbox.publish(object())

    def test_publish_direct(self, populated_market):
        notification = populated_market.mailbox.publish(
            JobAccepted(job_id=42, client="alice", freelancer="bob", amount=10.0)
        )
        assert notification.recipient == "alice"
        assert notification.is_pending_payment is True

    def test_get_unknown_notification(self, populated_market):
        with pytest.raises(NotificationNotFoundError):
            populated_market.mailbox.get_notification(123)


class TestDeliveryLocking:
    """Only payment delivery is serialized by the mailbox lock."""

    def test_job_accepted_not_blocked_by_payment_lock(self, populated_market):
        mailbox = populated_market.mailbox
        delivered = []

        def deliver():
            delivered.append(mailbox.publish(
                JobAccepted(job_id=7, client="alice", freelancer="bob", amount=50.0)
            ))

        with mailbox._lock:
            worker = threading.Thread(target=deliver)
            worker.start()
            worker.join(timeout=2.0)
            finished = not worker.is_alive()

        worker.join()
        assert finished
        assert delivered[0].related_job_id == 7

    def test_direct_hire_not_blocked_by_payment_lock(self, populated_market):
        mailbox = populated_market.mailbox
        delivered = []

        def deliver():
            delivered.append(mailbox.publish(
                DirectHireRequested(job_id=8, client="alice", freelancer="bob", amount=20.0)
            ))

        with mailbox._lock:
            worker = threading.Thread(target=deliver)
            worker.start()
            worker.join(timeout=2.0)
            finished = not worker.is_alive()

        worker.join()
        assert finished
        assert [n.title for n in populated_market.get_inbox("bob")] == ["New Direct Hire Request"]

    def test_concurrent_acceptances_keep_every_notification(self, populated_market):
        ids = [
            populated_market.post_job("alice", "web", "low", 1, f"Job {n}")
            for n in range(10)
        ]
        barrier = threading.Barrier(len(ids))

        def accept(job_id):
            barrier.wait()
            populated_market.accept_job(job_id, "bob")

        threads = [threading.Thread(target=accept, args=(i,)) for i in ids]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        inbox = populated_market.get_inbox("alice")
        assert sorted(n.related_job_id for n in inbox) == ids
        assert len({n.id for n in inbox}) == len(ids)
