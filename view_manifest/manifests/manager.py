"""
Manifest of dates for which views exist in the object store.

The manifest is a sorted set of ISO dates persisted as <prefix>manifest.json
and reconstructible by listing <prefix>views/. It tolerates staleness, two
disagreeing sources, and concurrent writers: loads are single-flight and
cached for a short time, saves are serialized and coalesced.

Usage:
    manifest = Manifest(store=S3Client(bucket="views"), prefix="prod/")
    manifest.get_dates_before("2020-01-10", limit=5)
    manifest.add_date("2020-01-11")
"""

from __future__ import annotations

import time
from datetime import date
from typing import Callable, List, Optional, Union

from loguru import logger

from .date_set import DateSet
from .freshness import FreshnessCache
from .loader import GRACE_DELAY_SECONDS, LoadCoordinator
from .saver import SaveCoordinator
from .snapshot import normalize_date

DateLike = Union[str, date]

ADD_DATE_RELOADS = 1


class Manifest:
    """
    Facade over the DateSet and its load/save coordinators.

    Thread-safe: any number of threads may query and add dates concurrently.
    """

    def __init__(
        self,
        store,
        prefix: str = "",
        bucket: Optional[str] = None,
        grace_delay: float = GRACE_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize manifest.

        Args:
            store: RemoteStore (S3Client, LocalStore, or compatible)
            prefix: Key prefix shared by the manifest blob and views/
            bucket: Override the store's default bucket
            grace_delay: Head start for the snapshot path before listing
            clock: Monotonic time source used for freshness expiry
        """
        self.store = store
        self.prefix = prefix
        self.bucket = bucket
        self._dates = DateSet()
        self._freshness = FreshnessCache(clock=clock)
        self._saver = SaveCoordinator(store, self._dates, self.key, bucket=bucket)
        self._loader = LoadCoordinator(
            store,
            self._dates,
            self._freshness,
            snapshot_key=self.key,
            views_prefix=self.views_prefix,
            on_changed=self._saver.save,
            bucket=bucket,
            grace_delay=grace_delay,
        )

        logger.info(f"Manifest initialized: key={self.key}")

    @property
    def key(self) -> str:
        return f"{self.prefix}manifest.json"

    @property
    def views_prefix(self) -> str:
        return f"{self.prefix}views/"

    @property
    def dates(self) -> List[str]:
        """Copy of the in-memory dates (no load is triggered)."""
        return self._dates.to_list()

    @property
    def is_fresh(self) -> bool:
        return self._freshness.is_fresh()

    def load(self) -> None:
        """Refresh from the store unless loaded within the freshness window."""
        self._loader.load()

    def save(self) -> None:
        """Persist the current dates, coalescing with concurrent saves."""
        self._saver.save()

    def close(self) -> None:
        """Let any background load path finish, then stop its workers."""
        self._loader.close()

    def get_dates_before(self, date: DateLike, limit: int) -> List[str]:
        """
        Dates strictly before ``date``, most recent ``limit`` of them, ascending.

        Raises:
            ManifestLoadError: If the manifest could not be loaded
        """
        date = normalize_date(date)
        self.load()
        return self._dates.range_before(date, limit)

    def add_date(self, date: DateLike) -> bool:
        """
        Record that a view exists for ``date``.

        A date missing from memory may only be missing because the in-memory
        copy is stale, so the manifest is reloaded once before inserting.

        Returns:
            True if the date was new and the manifest was saved
        """
        date = normalize_date(date)

        for attempt in range(ADD_DATE_RELOADS + 1):
            if date in self._dates:
                logger.debug(f"Manifest already contains {date}")
                return False
            if attempt < ADD_DATE_RELOADS:
                self._freshness.invalidate()
                self.load()

        if not self._dates.insert_sorted(date):
            # Inserted by a concurrent caller after our check
            return False

        logger.info(f"Manifest add: {date}")
        self.save()
        return True
