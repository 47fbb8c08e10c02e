"""
Job data models.

A Job is a client-posted unit of work with a computed price and a
three-state lifecycle. Job instances are frozen: a lifecycle transition
produces a new snapshot (dataclasses.replace), so a Job handed to another
thread can never change underneath it and `price` can never be edited.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional


class JobStatus(Enum):
    """
    Status of a job.

    Lifecycle:
        OPEN -> ACCEPTED -> PAID
    """

    OPEN = "open"
    """Posted and waiting for a freelancer."""

    ACCEPTED = "accepted"
    """Accepted by exactly one freelancer, awaiting payment."""

    PAID = "paid"
    """Payment confirmed. Terminal."""


# Valid state transitions (forward-only, no cycles)
VALID_TRANSITIONS = {
    JobStatus.OPEN: {JobStatus.ACCEPTED},
    JobStatus.ACCEPTED: {JobStatus.PAID},
    JobStatus.PAID: set(),
}


def can_transition(from_status: JobStatus, to_status: JobStatus) -> bool:
    """Check if a status transition is valid."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Job:
    """
    A posted job.

    Invariants:
        - accepted_by is set iff status != OPEN, and never changes once set
        - price never changes after creation
    """

    id: int
    """Unique, monotonically assigned id."""

    posted_by: str
    """Username of the client who posted the job."""

    service_type: str
    """Service key (web, design, content, ...)."""

    complexity: str
    """Complexity level (low, medium, high)."""

    hours: float
    """Estimated hours of work."""

    description: str
    """Free-text description from the client."""

    price: float
    """Computed price at full precision."""

    status: JobStatus = JobStatus.OPEN
    """Current lifecycle state."""

    accepted_by: Optional[str] = None
    """Username of the accepting freelancer."""

    direct_hire_to: Optional[str] = None
    """Freelancer the job is reserved for (direct hire), if any."""

    created_at: str = ""
    accepted_at: Optional[str] = None
    paid_at: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status == JobStatus.OPEN

    @property
    def display_price(self) -> float:
        """Price rounded to cents for display."""
        return round(self.price, 2)

    def is_visible_to(self, freelancer: str) -> bool:
        """Whether a freelancer may see and accept this job."""
        return self.direct_hire_to is None or self.direct_hire_to == freelancer

    def accepted(self, freelancer: str) -> "Job":
        """Return the ACCEPTED snapshot of this job."""
        return replace(
            self,
            status=JobStatus.ACCEPTED,
            accepted_by=freelancer,
            accepted_at=_now(),
        )

    def paid(self) -> "Job":
        """Return the PAID snapshot of this job."""
        return replace(self, status=JobStatus.PAID, paid_at=_now())

    @classmethod
    def create(
        cls,
        job_id: int,
        posted_by: str,
        service_type: str,
        complexity: str,
        hours: float,
        description: str,
        price: float,
        direct_hire_to: Optional[str] = None,
    ) -> "Job":
        """Create a new OPEN job stamped with the current time."""
        return cls(
            id=job_id,
            posted_by=posted_by,
            service_type=service_type,
            complexity=complexity,
            hours=hours,
            description=description,
            price=price,
            status=JobStatus.OPEN,
            direct_hire_to=direct_hire_to,
            created_at=_now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and JSON responses."""
        return {
            "id": self.id,
            "posted_by": self.posted_by,
            "service_type": self.service_type,
            "complexity": self.complexity,
            "hours": self.hours,
            "description": self.description,
            "price": self.price,
            "status": self.status.value,
            "accepted_by": self.accepted_by,
            "direct_hire_to": self.direct_hire_to,
            "created_at": self.created_at,
            "accepted_at": self.accepted_at,
            "paid_at": self.paid_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """Create from a stored dictionary."""
        return cls(
            id=int(data["id"]),
            posted_by=data.get("posted_by", ""),
            service_type=data.get("service_type", ""),
            complexity=data.get("complexity", ""),
            hours=data.get("hours", 0),
            description=data.get("description", ""),
            price=data.get("price", 0.0),
            status=JobStatus(data.get("status", "open")),
            accepted_by=data.get("accepted_by"),
            direct_hire_to=data.get("direct_hire_to"),
            created_at=data.get("created_at", ""),
            accepted_at=data.get("accepted_at"),
            paid_at=data.get("paid_at"),
        )
