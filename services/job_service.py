"""
Job lifecycle service.

Owns job records and enforces the state machine:

    OPEN --accept_job--> ACCEPTED --mark_paid--> PAID

No other transitions exist; there are no cycles.

PER-JOB MUTUAL EXCLUSION:
    - Every transition runs under a lock scoped to ONE job id
    - Locks are created lazily and never shared between jobs, so accepting
      job 1 never waits on job 2
    - Inside the lock the current status is re-read from the store, checked,
      and the new snapshot written durably (check-and-set)

Acceptance races:
    The first acceptance to commit wins. Every other concurrent or later
    attempt observes ACCEPTED/PAID and fails immediately with JobNotOpenError.
    accepted_by is written once and never changes afterwards.

Flow:
    1. Client posts a job -> price computed -> stored OPEN
    2. Freelancer lists open jobs (oldest first)
    3. Freelancer accepts -> ACCEPTED -> JobAccepted published to the mailbox
    4. PaymentService confirms -> mark_paid -> PAID

Usage:
    job = job_service.post_job("alice", "content", "high", 5, "Blog posts")
    job = job_service.accept_job(job.id, "bob")
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from core.exceptions import (
    JobNotAcceptedError,
    JobNotFoundError,
    JobNotOpenError,
    MarketplaceError,
    StorageUnavailableError,
    ValidationError,
)
from core.store import Collection
from models.events import DirectHireRequested, JobAccepted
from models.job import Job, JobStatus, can_transition
from modules import pricing
from modules.sanitize import sanitize_text
from services.identity_service import IdentityService
from services.mailbox_service import MailboxService
from logging_config import get_logger, get_job_logger


# Module logger
logger = get_logger(__name__)

DEFAULT_MAX_DESCRIPTION_LENGTH = 2000


class JobService:
    """
    Service owning job records (sole writer of `jobs`).

    Attributes:
        max_description_length: Descriptions are truncated to this length
    """

    def __init__(
        self,
        collection: Collection,
        identity: IdentityService,
        mailbox: MailboxService,
        max_description_length: int = DEFAULT_MAX_DESCRIPTION_LENGTH,
    ):
        self._collection = collection
        self._identity = identity
        self._mailbox = mailbox
        self.max_description_length = max_description_length

        # One lock per job id
        self._job_locks: Dict[int, threading.RLock] = {}
        self._locks_guard = threading.Lock()

        logger.info(f"JobService initialized ({len(collection)} jobs loaded)")

    # =========================================================================
    # LOCKING
    # =========================================================================

    @contextmanager
    def job_lock(self, job_id: int) -> Iterator[None]:
        """
        Hold the lock for a single job.

        Re-entrant, so a caller holding it (PaymentService) can call
        mark_paid() for the same job. Locks exist only for stored jobs.

        Raises:
            JobNotFoundError: If no job has this id
        """
        job_id = _coerce_job_id(job_id)
        if job_id not in self._collection:
            raise JobNotFoundError(job_id)

        with self._locks_guard:
            lock = self._job_locks.setdefault(job_id, threading.RLock())
        with lock:
            yield

    # =========================================================================
    # POSTING
    # =========================================================================

    def post_job(
        self,
        client: str,
        service_type: str,
        complexity: str,
        hours: Any,
        description: str,
        direct_hire_to: Optional[str] = None,
    ) -> Job:
        """
        Post a new job in OPEN state.

        Args:
            client: Username of a registered client
            service_type: Service key (unknown keys price at the default rate)
            complexity: low, medium or high
            hours: Estimated hours (> 0)
            description: What needs doing
            direct_hire_to: Optional freelancer the job is reserved for

        Returns:
            The stored Job

        Raises:
            ValidationError: Missing/invalid fields, unknown client or freelancer
            StorageUnavailableError: If the job could not be stored
        """
        self._identity.require_client(client)

        if not isinstance(service_type, str) or not service_type.strip():
            raise ValidationError("Field 'service_type' is required", field="service_type")

        description = sanitize_text(description, self.max_description_length)
        if not description:
            raise ValidationError("Field 'description' is required", field="description")

        if direct_hire_to:
            self._identity.require_freelancer(direct_hire_to, field="direct_hire_to")

        price_quote = pricing.build_quote(service_type, complexity, hours)

        job = Job.create(
            job_id=self._collection.allocate_id(),
            posted_by=client,
            service_type=price_quote.service_type,
            complexity=price_quote.complexity,
            hours=price_quote.hours,
            description=description,
            price=price_quote.price,
            direct_hire_to=direct_hire_to or None,
        )
        self._save(job)

        job_logger = get_job_logger(job.id)
        job_logger.info(
            f"Posted by {client}: {price_quote.service_name}, {job.complexity}, "
            f"{job.hours:g}h, price {job.display_price:.2f}"
        )

        if job.direct_hire_to:
            self._mailbox.publish(DirectHireRequested(
                job_id=job.id,
                client=client,
                freelancer=job.direct_hire_to,
                amount=job.price,
            ))

        return job

    # =========================================================================
    # READS
    # =========================================================================

    def get_job(self, job_id: int) -> Job:
        """
        Raises:
            JobNotFoundError: If no job has this id
        """
        record = self._collection.get(_coerce_job_id(job_id))
        if record is None:
            raise JobNotFoundError(job_id)
        return Job.from_dict(record)

    def list_open_jobs(self, freelancer: Optional[str] = None) -> List[Job]:
        """
        List OPEN jobs in posting order (oldest first, ascending id).

        Args:
            freelancer: If given, hide jobs reserved for other freelancers
        """
        jobs = [
            job for job in self._all_jobs()
            if job.is_open and (freelancer is None or job.is_visible_to(freelancer))
        ]
        logger.debug(f"{len(jobs)} open job(s)")
        return jobs

    def list_jobs_for(self, username: str) -> List[Job]:
        """Jobs a user posted or accepted, oldest first."""
        return [
            job for job in self._all_jobs()
            if job.posted_by == username or job.accepted_by == username
        ]

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def accept_job(self, job_id: int, freelancer: str) -> Job:
        """
        Accept an OPEN job (atomic check-and-set).

        On success the poster is notified via a JobAccepted event. If that
        notification cannot be stored, the acceptance is rolled back and the
        error raised, so an accepted job always has its notification.

        Args:
            job_id: Job to accept
            freelancer: Username of a registered freelancer

        Returns:
            The ACCEPTED Job

        Raises:
            ValidationError: If freelancer is not a registered freelancer
            JobNotFoundError: If the job does not exist
            JobNotOpenError: Already accepted/paid, or reserved for someone else
            StorageUnavailableError: If the acceptance could not be stored
        """
        self._identity.require_freelancer(freelancer)
        job_id = _coerce_job_id(job_id)
        job_logger = get_job_logger(job_id)

        with self.job_lock(job_id):
            job = self.get_job(job_id)

            if not can_transition(job.status, JobStatus.ACCEPTED):
                job_logger.warning(
                    f"Acceptance by {freelancer} rejected: status is {job.status.value}"
                )
                raise JobNotOpenError(job.id, job.status.value)

            if not job.is_visible_to(freelancer):
                job_logger.warning(
                    f"Acceptance by {freelancer} rejected: reserved for {job.direct_hire_to}"
                )
                raise JobNotOpenError(
                    job.id,
                    job.status.value,
                    message=f"Job {job.id} is reserved for another freelancer",
                )

            accepted = job.accepted(freelancer)
            self._save(accepted)

            try:
                self._mailbox.publish(JobAccepted(
                    job_id=job.id,
                    client=job.posted_by,
                    freelancer=freelancer,
                    amount=job.price,
                ))
            except MarketplaceError as e:
                job_logger.error(f"Could not notify {job.posted_by}, rolling back: {e}")
                self._rollback(job, job_logger)
                raise

        job_logger.info(f"Accepted by {freelancer}")
        return accepted

    def mark_paid(self, job_id: int) -> bool:
        """
        Move an ACCEPTED job to PAID.

        Returns:
            True if the job transitioned, False if it was already PAID

        Raises:
            JobNotFoundError: If the job does not exist
            JobNotAcceptedError: If the job is still OPEN
            StorageUnavailableError: If the transition could not be stored
        """
        job_id = _coerce_job_id(job_id)
        job_logger = get_job_logger(job_id)

        with self.job_lock(job_id):
            job = self.get_job(job_id)

            if job.status == JobStatus.PAID:
                job_logger.debug("Already paid")
                return False

            if not can_transition(job.status, JobStatus.PAID):
                raise JobNotAcceptedError(job.id, job.status.value)

            self._save(job.paid())

        job_logger.info("Marked paid")
        return True

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _all_jobs(self) -> List[Job]:
        jobs = [Job.from_dict(record) for record in self._collection.values()]
        jobs.sort(key=lambda job: job.id)
        return jobs

    def _save(self, job: Job) -> None:
        self._collection.put(job.id, job.to_dict())

    def _rollback(self, previous: Job, job_logger) -> None:
        try:
            self._save(previous)
        except StorageUnavailableError as e:
            job_logger.error(f"Rollback to {previous.status.value} failed: {e}")


def _coerce_job_id(job_id: Any) -> int:
    """Job ids are ints; numeric strings (URL paths) are accepted."""
    if isinstance(job_id, bool):
        raise JobNotFoundError(job_id)
    try:
        return int(job_id)
    except (TypeError, ValueError):
        raise JobNotFoundError(job_id)
