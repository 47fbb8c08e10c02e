"""
Marketplace boundary.

The presentation layer talks to the core ONLY through Marketplace. Each
method is one boundary operation; ids go in, plain records come out. The
HTTP blueprints in routes/ are a thin JSON wrapper around this class, and
an in-process UI can call it directly.

Usage:
    market = Marketplace.create(data_dir="/var/lib/market")

    market.register_user({"username": "alice", "password": "pw12",
                          "name": "Alice", "role": "client"})
    job_id = market.post_job("alice", "content", "high", 5, "Three blog posts")
    market.accept_job(job_id, "bob")
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from core.store import DataStore
from models.job import Job
from models.notification import Notification
from models.payment import PaymentIntent
from models.user import FreelancerProfile, User
from modules import pricing
from modules.pricing import PriceQuote
from services.directory_service import FreelancerDirectory
from services.identity_service import IdentityService
from services.job_service import JobService, DEFAULT_MAX_DESCRIPTION_LENGTH
from services.mailbox_service import MailboxService
from services.payment_service import PaymentGatewayStub, PaymentService
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class Marketplace:
    """
    Facade over the marketplace services.

    Attributes:
        store: The DataStore behind every service
        identity, directory, mailbox, jobs, payments: the component services
    """

    def __init__(
        self,
        store: DataStore,
        identity: IdentityService,
        directory: FreelancerDirectory,
        mailbox: MailboxService,
        jobs: JobService,
        payments: PaymentService,
    ):
        self.store = store
        self.identity = identity
        self.directory = directory
        self.mailbox = mailbox
        self.jobs = jobs
        self.payments = payments

    @classmethod
    def create(
        cls,
        data_dir: Optional[str] = None,
        max_retries: int = 3,
        retry_delay_seconds: float = 0.05,
        payment_delay_seconds: float = 0.0,
        payment_timeout_seconds: float = 10.0,
        max_description_length: int = DEFAULT_MAX_DESCRIPTION_LENGTH,
    ) -> "Marketplace":
        """
        Open the store and wire up all services.

        Args:
            data_dir: Directory for collection files; None/"" for in-memory
            max_retries: Storage attempts before StorageUnavailableError
            retry_delay_seconds: Pause between storage attempts
            payment_delay_seconds: Simulated gateway latency
            payment_timeout_seconds: Gateway timeout
            max_description_length: Job descriptions are truncated to this

        Raises:
            StorageUnavailableError: If an existing collection cannot be loaded
        """
        store = DataStore.open(
            data_dir,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
        )
        return cls.from_store(
            store,
            gateway=PaymentGatewayStub(payment_delay_seconds, payment_timeout_seconds),
            max_description_length=max_description_length,
        )

    @classmethod
    def from_store(
        cls,
        store: DataStore,
        gateway: Optional[PaymentGatewayStub] = None,
        max_description_length: int = DEFAULT_MAX_DESCRIPTION_LENGTH,
    ) -> "Marketplace":
        """Wire services around an already opened store."""
        directory = FreelancerDirectory(store.freelancers)
        identity = IdentityService(store.users, directory)
        mailbox = MailboxService(store.notifications, identity)
        jobs = JobService(
            store.jobs, identity, mailbox, max_description_length=max_description_length
        )
        payments = PaymentService(jobs, mailbox, gateway)

        logger.info("Marketplace services ready")
        return cls(store, identity, directory, mailbox, jobs, payments)

    # =========================================================================
    # PRICING
    # =========================================================================

    def quote_price(self, service_type: str, complexity: str, hours: Any) -> PriceQuote:
        return pricing.build_quote(service_type, complexity, hours)

    def list_services(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "services": pricing.list_services(),
            "complexities": pricing.list_complexities(),
        }

    # =========================================================================
    # JOBS
    # =========================================================================

    def post_job(
        self,
        client_id: str,
        service_type: str,
        complexity: str,
        hours: Any,
        description: str,
        direct_hire_to: Optional[str] = None,
    ) -> int:
        """Post a job and return its id."""
        job = self.jobs.post_job(
            client_id, service_type, complexity, hours, description, direct_hire_to
        )
        return job.id

    def list_open_jobs(self, freelancer_id: Optional[str] = None) -> List[Job]:
        return self.jobs.list_open_jobs(freelancer_id)

    def get_job(self, job_id: Union[int, str]) -> Job:
        return self.jobs.get_job(job_id)

    def accept_job(self, job_id: Union[int, str], freelancer_id: str) -> Job:
        return self.jobs.accept_job(job_id, freelancer_id)

    # =========================================================================
    # MAILBOX & PAYMENTS
    # =========================================================================

    def get_inbox(self, user_id: str) -> List[Notification]:
        return self.mailbox.get_inbox(user_id)

    def request_payment(self, notification_id: int) -> PaymentIntent:
        return self.payments.request_payment(notification_id)

    def confirm_payment(self, intent_id: str) -> bool:
        return self.payments.confirm_payment(intent_id)

    # =========================================================================
    # USERS & DIRECTORY
    # =========================================================================

    def register_user(self, profile: Dict[str, Any]) -> str:
        return self.identity.register_user(profile)

    def authenticate(self, username: str, secret: str) -> str:
        return self.identity.authenticate(username, secret)

    def get_user(self, username: str) -> Optional[User]:
        return self.identity.get_user(username)

    def update_profile(self, username: str, **changes: Any) -> User:
        return self.identity.update_profile(username, **changes)

    def search_freelancers(self, term: Optional[str]) -> List[FreelancerProfile]:
        return self.directory.search(term)
