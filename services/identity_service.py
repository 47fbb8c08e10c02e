"""
Identity store: signup, authentication and profile edits.

The users collection is written ONLY here. Every other service reads users
through get_user()/require_client()/require_freelancer().

Passwords are stored as werkzeug hashes. Authentication failures use one
generic error so callers cannot tell unknown usernames from wrong secrets.
"""

from __future__ import annotations

import re
import threading
from typing import Any, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from core.exceptions import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    StorageUnavailableError,
    ValidationError,
)
from core.store import Collection
from models.user import (
    Client,
    Freelancer,
    User,
    ROLE_CLIENT,
    ROLE_FREELANCER,
    user_from_dict,
)
from services.directory_service import FreelancerDirectory
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,32}$")
MIN_PASSWORD_LENGTH = 4

# Fields a profile edit may change, by role
EDITABLE_FIELDS = {
    ROLE_CLIENT: {"name", "email", "phone"},
    ROLE_FREELANCER: {"name", "email", "phone", "specialization", "rating"},
}
TEXT_FIELDS = {"name", "email", "phone", "specialization"}


class IdentityService:
    """
    Service owning user records.

    Attributes:
        directory: FreelancerDirectory kept in sync with freelancer signups/edits
    """

    def __init__(self, collection: Collection, directory: FreelancerDirectory):
        self._collection = collection
        self.directory = directory
        self._lock = threading.Lock()

    # =========================================================================
    # SIGNUP / LOGIN
    # =========================================================================

    def register_user(self, profile: Dict[str, Any]) -> str:
        """
        Create a user from signup data.

        Args:
            profile: Dict with username, password, name, role and optionally
                email, phone, specialization, rating

        Returns:
            The new user's username

        Raises:
            ValidationError: If a required field is missing or invalid
            DuplicateUsernameError: If the username is taken
            StorageUnavailableError: If the user could not be stored; nothing
                (directory included) is left behind, so the signup can be retried
        """
        username = _require_str(profile, "username")
        if not USERNAME_PATTERN.match(username):
            raise ValidationError(
                "Username must be 3-32 letters, digits, '.', '_' or '-'",
                field="username",
            )

        password = profile.get("password") or ""
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )

        name = _require_str(profile, "name")
        role = _require_str(profile, "role").lower()

        common = {
            "username": username,
            "name": name,
            "email": _optional_str(profile, "email"),
            "phone": _optional_str(profile, "phone"),
            "password_hash": generate_password_hash(password),
        }

        user: User
        if role == ROLE_CLIENT:
            user = Client(**common)
        elif role == ROLE_FREELANCER:
            user = Freelancer(
                specialization=_optional_str(profile, "specialization"),
                rating=_validate_rating(profile.get("rating", 0.0)),
                **common,
            )
        else:
            raise ValidationError(
                f"Role must be '{ROLE_CLIENT}' or '{ROLE_FREELANCER}'", field="role"
            )

        with self._lock:
            if username in self._collection:
                logger.warning(f"Signup rejected, username taken: {username}")
                raise DuplicateUsernameError(username)

            # Directory first: a stored user always has its profile
            if isinstance(user, Freelancer) and not self.directory.register(user):
                logger.warning(f"Replacing stale directory profile for {username}")
                self.directory.update(user)

            try:
                self._collection.put(username, user.to_dict())
            except StorageUnavailableError as e:
                logger.error(f"Signup of {username} failed: {e}")
                if isinstance(user, Freelancer):
                    self._undo_directory_entry(username)
                raise

        logger.info(f"Registered {role} {username}")
        return username

    def authenticate(self, username: str, secret: str) -> str:
        """
        Check a username/secret pair.

        Returns:
            The username on success

        Raises:
            InvalidCredentialsError: For unknown users and wrong secrets alike
        """
        record = self._collection.get(username) if isinstance(username, str) else None
        if record is None or not isinstance(secret, str):
            logger.info("Authentication failed")
            raise InvalidCredentialsError()

        if not check_password_hash(record.get("password_hash", ""), secret):
            logger.info("Authentication failed")
            raise InvalidCredentialsError()

        logger.info(f"Authenticated {username}")
        return username

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_user(self, username: str) -> Optional[User]:
        """Return the user, or None if unknown."""
        if not isinstance(username, str):
            return None
        record = self._collection.get(username)
        return user_from_dict(record) if record else None

    def require_client(self, username: str) -> Client:
        """
        Raises:
            ValidationError: If username is not a registered client
        """
        user = self.get_user(username)
        if not isinstance(user, Client):
            raise ValidationError(f"Unknown client: {username!r}", field="client")
        return user

    def require_freelancer(self, username: str, field: str = "freelancer") -> Freelancer:
        """
        Raises:
            ValidationError: If username is not a registered freelancer
        """
        user = self.get_user(username)
        if not isinstance(user, Freelancer):
            raise ValidationError(f"Unknown freelancer: {username!r}", field=field)
        return user

    # =========================================================================
    # PROFILE EDITS
    # =========================================================================

    def update_profile(self, username: str, **changes: Any) -> User:
        """
        Edit a user's profile.

        Only name, email and phone (plus specialization and rating for
        freelancers) can change. Username, role and password cannot.

        Raises:
            ValidationError: Unknown user, empty name, non-text field, or a
                non-editable field
            StorageUnavailableError: If the edit could not be stored
        """
        with self._lock:
            user = self.get_user(username)
            if user is None:
                raise ValidationError(f"Unknown user: {username!r}", field="username")

            allowed = EDITABLE_FIELDS[user.role]
            unknown = set(changes) - allowed
            if unknown:
                raise ValidationError(
                    f"Cannot edit field(s): {', '.join(sorted(unknown))}",
                    field=sorted(unknown)[0],
                )

            for field in TEXT_FIELDS & set(changes):
                if field == "name":
                    changes[field] = _require_str(changes, field)
                else:
                    changes[field] = _optional_str(changes, field)
            if "rating" in changes:
                changes["rating"] = _validate_rating(changes["rating"])

            updated = user.with_changes(**changes)

            if isinstance(updated, Freelancer):
                self.directory.update(updated)

            try:
                self._collection.put(username, updated.to_dict())
            except StorageUnavailableError as e:
                logger.error(f"Profile update for {username} failed: {e}")
                if isinstance(user, Freelancer):
                    self._restore_directory_entry(user)
                raise

        logger.info(f"Profile updated for {username}: {', '.join(sorted(changes))}")
        return updated

    # =========================================================================
    # DIRECTORY COMPENSATION
    # =========================================================================

    def _undo_directory_entry(self, username: str) -> None:
        try:
            self.directory.unregister(username)
        except StorageUnavailableError as e:
            logger.error(f"Could not remove directory profile for {username}: {e}")

    def _restore_directory_entry(self, previous: Freelancer) -> None:
        try:
            self.directory.update(previous)
        except StorageUnavailableError as e:
            logger.error(f"Could not restore directory profile for {previous.username}: {e}")


def _require_str(data: Dict[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Field '{field}' is required", field=field)
    return value.strip()


def _optional_str(data: Dict[str, Any], field: str) -> str:
    """Missing or None becomes ''; any other non-string is rejected."""
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Field '{field}' must be text", field=field)
    return value.strip()


def _validate_rating(value: Any) -> float:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Rating must be a number", field="rating")
    if not 0.0 <= rating <= 5.0:
        raise ValidationError("Rating must be between 0 and 5", field="rating")
    return rating
