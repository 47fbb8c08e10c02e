"""
Freelancer directory.

Registry of freelancer profiles fed by freelancer signups, searchable by
name or specialization. Profiles are kept in registration order, which is
also the order search results come back in.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from core.store import Collection
from models.user import Freelancer, FreelancerProfile
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class FreelancerDirectory:
    """Searchable registry of freelancer profiles (sole writer of `freelancers`)."""

    def __init__(self, collection: Collection):
        self._collection = collection
        self._lock = threading.Lock()

    def register(self, freelancer: Freelancer) -> bool:
        """
        Add a freelancer to the directory.

        Returns:
            True if added, False if a profile with that username already exists
        """
        with self._lock:
            if freelancer.username in self._collection:
                logger.debug(f"Freelancer {freelancer.username} already in directory")
                return False

            self._collection.put(freelancer.username, freelancer.to_profile().to_dict())

        logger.info(f"Registered freelancer {freelancer.username} in directory")
        return True

    def unregister(self, username: str) -> bool:
        """Drop a profile whose signup did not complete."""
        with self._lock:
            removed = self._collection.delete(username)
        if removed:
            logger.info(f"Removed freelancer {username} from directory")
        return removed

    def update(self, freelancer: Freelancer) -> None:
        """Refresh a profile after a profile edit (registers it if missing)."""
        with self._lock:
            self._collection.put(freelancer.username, freelancer.to_profile().to_dict())
        logger.debug(f"Directory profile refreshed for {freelancer.username}")

    def get(self, username: str) -> Optional[FreelancerProfile]:
        record = self._collection.get(username)
        return FreelancerProfile.from_dict(record) if record else None

    def all(self) -> List[FreelancerProfile]:
        return [FreelancerProfile.from_dict(r) for r in self._collection.values()]

    def search(self, term: Optional[str]) -> List[FreelancerProfile]:
        """
        Case-insensitive substring search on name OR specialization.

        A blank term returns every profile. Results keep registration order.
        """
        profiles = self.all()
        term = (term or "").strip()
        if not term:
            return profiles

        matches = [p for p in profiles if p.matches(term)]
        logger.debug(f"Directory search {term!r}: {len(matches)} match(es)")
        return matches
