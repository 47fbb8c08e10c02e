"""
User data models.

Users are a discriminated union on `role`:

    Client     { username, name, email, phone }
    Freelancer { username, name, email, phone, rating, specialization }

so freelancer-only fields never appear (or need None checks) on clients.
`username` is the single stable identity key used everywhere else in the
system, including mailbox matching. Display names are never used as keys.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, Dict, Any, Union

from core.exceptions import ValidationError


ROLE_CLIENT = "client"
ROLE_FREELANCER = "freelancer"
ROLES = (ROLE_CLIENT, ROLE_FREELANCER)


@dataclass(frozen=True)
class UserProfile:
    """Fields shared by every role."""

    role: ClassVar[str] = ""

    username: str
    name: str
    email: str = ""
    phone: str = ""

    password_hash: str = ""
    """werkzeug password hash. Never included in public output."""

    @property
    def contact(self) -> str:
        """Contact reference shown to the other party of a job."""
        parts = [p for p in (self.email, self.phone) if p]
        return " / ".join(parts) if parts else self.username

    def with_changes(self, **changes: Any) -> "UserProfile":
        """Return an edited copy (profile edits)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage (includes the password hash)."""
        data = self.to_public_dict()
        data["password_hash"] = self.password_hash
        return data

    def to_public_dict(self) -> Dict[str, Any]:
        """Convert to dictionary safe to hand to the presentation layer."""
        return {
            "username": self.username,
            "role": self.role,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class Client(UserProfile):
    """A user who posts and pays for jobs."""

    role: ClassVar[str] = ROLE_CLIENT


@dataclass(frozen=True)
class Freelancer(UserProfile):
    """A user who accepts jobs and gets paid."""

    role: ClassVar[str] = ROLE_FREELANCER

    specialization: str = ""
    rating: float = 0.0

    def to_public_dict(self) -> Dict[str, Any]:
        data = super().to_public_dict()
        data["specialization"] = self.specialization
        data["rating"] = self.rating
        return data

    def to_profile(self) -> "FreelancerProfile":
        """Directory view of this freelancer."""
        return FreelancerProfile(
            username=self.username,
            name=self.name,
            email=self.email,
            specialization=self.specialization,
            rating=self.rating,
        )


User = Union[Client, Freelancer]


def user_from_dict(data: Dict[str, Any]) -> User:
    """
    Create the right User variant from a stored dictionary.

    Raises:
        ValidationError: If the role is missing or unknown
    """
    role = data.get("role")
    common = {
        "username": data.get("username", ""),
        "name": data.get("name", ""),
        "email": data.get("email", ""),
        "phone": data.get("phone", ""),
        "password_hash": data.get("password_hash", ""),
    }

    if role == ROLE_CLIENT:
        return Client(**common)
    if role == ROLE_FREELANCER:
        return Freelancer(
            specialization=data.get("specialization", ""),
            rating=float(data.get("rating", 0.0)),
            **common,
        )
    raise ValidationError(f"Unknown role: {role!r}", field="role")


@dataclass(frozen=True)
class FreelancerProfile:
    """
    Public directory entry for a freelancer.

    Owned by the FreelancerDirectory and fed by freelancer signups.
    """

    username: str
    name: str
    email: str = ""
    specialization: str = ""
    rating: float = 0.0

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name or specialization."""
        needle = term.casefold()
        return needle in self.name.casefold() or needle in self.specialization.casefold()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "specialization": self.specialization,
            "rating": self.rating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FreelancerProfile":
        return cls(
            username=data.get("username", ""),
            name=data.get("name", ""),
            email=data.get("email", ""),
            specialization=data.get("specialization", ""),
            rating=float(data.get("rating", 0.0)),
        )
