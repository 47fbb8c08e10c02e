"""
Durable keyed collections for the marketplace state.

The store holds four independent collections - users, jobs, notifications,
freelancers - each a mapping from id to a plain-dict record, persisted as
one JSON file per collection.

Thread Safety:
    - Each collection has its OWN write lock; writes to one collection never
      block another collection
    - Writers build a new mapping, flush it durably, then swap the reference
    - Readers use the current reference without locking (Python's GIL makes
      the reference swap atomic), so reads never wait on a flush
    - A failed flush never swaps, so in-memory state always matches disk

Durability:
    Every put() writes a temp file, fsyncs it and renames it over the
    collection file before returning. Transient OSErrors are retried a
    bounded number of times, then surfaced as StorageUnavailableError.

Usage:
    store = DataStore.open("/var/lib/market", max_retries=3)

    job_id = store.jobs.allocate_id()
    store.jobs.put(job_id, job.to_dict())

    record = store.jobs.get(job_id)
"""

from __future__ import annotations

import json
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from core.exceptions import StorageUnavailableError
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

COLLECTION_NAMES = ("users", "jobs", "notifications", "freelancers")


class Collection:
    """
    A single durable id -> record mapping.

    Keys are stored as strings (JSON object keys) and accepted as int or str.
    Iteration order is insertion order, which callers rely on for
    "registration order" and "posting order".

    Attributes:
        name: Collection name (also the file stem)
        path: JSON file path, or None for an in-memory collection
    """

    def __init__(
        self,
        name: str,
        path: Optional[Path] = None,
        max_retries: int = 3,
        retry_delay_seconds: float = 0.05,
    ):
        """
        Initialize and load the collection.

        Args:
            name: Collection name
            path: File to persist to (None keeps data in memory only)
            max_retries: Attempts per read/flush before giving up
            retry_delay_seconds: Pause between attempts

        Raises:
            StorageUnavailableError: If an existing file cannot be loaded
        """
        self.name = name
        self.path = path
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay_seconds

        self._write_lock = threading.Lock()
        self._id_lock = threading.Lock()

        self._records: Dict[str, Dict[str, Any]] = self._load()
        self._last_id = max(
            (int(key) for key in self._records if key.isdigit()),
            default=0,
        )

        logger.debug(f"Collection '{name}' loaded with {len(self._records)} records")

    # =========================================================================
    # READS (lock-free snapshot)
    # =========================================================================

    def get(self, key: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Return a copy of the record for key, or None."""
        record = self._records.get(str(key))
        return dict(record) if record is not None else None

    def values(self) -> List[Dict[str, Any]]:
        """Return copies of all records in insertion order."""
        return [dict(record) for record in self._records.values()]

    def __contains__(self, key: Union[int, str]) -> bool:
        return str(key) in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))

    # =========================================================================
    # WRITES (durable, serialized per collection)
    # =========================================================================

    def allocate_id(self) -> int:
        """
        Reserve the next sequential integer id.

        Ids are never reused, even if the write that used one fails.
        """
        with self._id_lock:
            self._last_id += 1
            return self._last_id

    def put(self, key: Union[int, str], record: Dict[str, Any]) -> None:
        """
        Insert or replace a single record and flush durably.

        Raises:
            StorageUnavailableError: If the flush failed; nothing was changed
        """
        self.put_many({key: record})

    def put_many(self, records: Dict[Union[int, str], Dict[str, Any]]) -> None:
        """
        Insert or replace several records in ONE durable write.

        Either all records become visible or none do.

        Raises:
            StorageUnavailableError: If the flush failed; nothing was changed
        """
        with self._write_lock:
            updated = dict(self._records)
            for key, record in records.items():
                updated[str(key)] = dict(record)

            self._flush(updated)

            # Atomic reference swap
            self._records = updated

    def delete(self, key: Union[int, str]) -> bool:
        """
        Remove a record and flush durably.

        Returns:
            True if the record existed

        Raises:
            StorageUnavailableError: If the flush failed; nothing was changed
        """
        with self._write_lock:
            if str(key) not in self._records:
                return False

            updated = dict(self._records)
            del updated[str(key)]

            self._flush(updated)
            self._records = updated
            return True

    # =========================================================================
    # FILE I/O
    # =========================================================================

    def _load(self) -> Dict[str, Dict[str, Any]]:
        """Read the collection file, retrying transient errors."""
        if self.path is None or not self.path.exists():
            return {}

        last_error: Optional[Exception] = None
        for attempt in range(1, self._max_retries + 1):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise StorageUnavailableError(
                        self.name, attempt, f"{self.path} does not contain a JSON object"
                    )
                return data
            except json.JSONDecodeError as e:
                # Corrupt file, retrying will not help
                logger.error(f"Collection '{self.name}' file is corrupt: {e}")
                raise StorageUnavailableError(self.name, attempt, str(e)) from e
            except OSError as e:
                last_error = e
                logger.warning(
                    f"Loading '{self.name}' failed (attempt {attempt}/{self._max_retries}): {e}"
                )
                if attempt < self._max_retries:
                    time.sleep(self._retry_delay)

        logger.error(f"Giving up loading '{self.name}': {last_error}")
        raise StorageUnavailableError(
            self.name, self._max_retries, str(last_error)
        ) from last_error

    def _flush(self, records: Dict[str, Dict[str, Any]]) -> None:
        """Write records to disk (temp file + fsync + rename), with retries."""
        if self.path is None:
            return

        payload = json.dumps(records, indent=2, sort_keys=False)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        last_error: Optional[OSError] = None
        for attempt in range(1, self._max_retries + 1):
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
                return
            except OSError as e:
                last_error = e
                logger.warning(
                    f"Flushing '{self.name}' failed (attempt {attempt}/{self._max_retries}): {e}"
                )
                if attempt < self._max_retries:
                    time.sleep(self._retry_delay)

        logger.error(f"Giving up flushing '{self.name}': {last_error}")
        raise StorageUnavailableError(
            self.name, self._max_retries, str(last_error)
        ) from last_error


class DataStore:
    """
    The four marketplace collections.

    Each service owns the single write path to its collection:
        users         -> IdentityService
        freelancers   -> FreelancerDirectory
        jobs          -> JobService
        notifications -> MailboxService
    """

    def __init__(
        self,
        users: Collection,
        jobs: Collection,
        notifications: Collection,
        freelancers: Collection,
        data_dir: Optional[Path] = None,
    ):
        self.users = users
        self.jobs = jobs
        self.notifications = notifications
        self.freelancers = freelancers
        self.data_dir = data_dir

    @property
    def is_persistent(self) -> bool:
        """Whether the collections are backed by files."""
        return self.data_dir is not None

    @classmethod
    def open(
        cls,
        data_dir: Optional[Union[str, Path]] = None,
        max_retries: int = 3,
        retry_delay_seconds: float = 0.05,
    ) -> "DataStore":
        """
        Load (or create) the store.

        Args:
            data_dir: Directory for the collection files; None or "" for in-memory
            max_retries: Attempts per read/flush
            retry_delay_seconds: Pause between attempts

        Returns:
            DataStore with all four collections loaded

        Raises:
            StorageUnavailableError: If a collection file cannot be loaded
        """
        directory: Optional[Path] = Path(data_dir) if data_dir else None
        if directory is not None:
            directory.mkdir(parents=True, exist_ok=True)

        collections = {
            name: Collection(
                name,
                path=directory / f"{name}.json" if directory is not None else None,
                max_retries=max_retries,
                retry_delay_seconds=retry_delay_seconds,
            )
            for name in COLLECTION_NAMES
        }

        where = str(directory) if directory is not None else "memory"
        logger.info(
            f"DataStore opened ({where}): "
            + ", ".join(f"{name}={len(c)}" for name, c in collections.items())
        )

        return cls(data_dir=directory, **collections)

    @classmethod
    def in_memory(cls) -> "DataStore":
        """Create a non-persistent store (tests, demos)."""
        return cls.open(None)
