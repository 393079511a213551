"""
Load coordinator: rebuilds the in-memory DateSet from two competing sources.

- Snapshot path: read <prefix>manifest.json (fast, may be stale or missing)
- Listing path: after a grace delay, list <prefix>views/ and extract dates
  from key names (slow, authoritative for the first page of keys)

Whichever path commits first releases the callers. The other one is not
cancelled; if it finishes later its dates still go through the cumulative
merge. Concurrent load() calls share one in-flight load, and a new load
does not start until the previous loser has returned.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from ..errors import ManifestError, ManifestLoadError
from ..utils.concurrency import FirstCommit, InFlight
from .date_set import DateSet
from .freshness import FreshnessCache
from .snapshot import decode_snapshot

GRACE_DELAY_SECONDS = 1.0
LIST_MAX_KEYS = 1000

SNAPSHOT_PATH = "snapshot"
LISTING_PATH = "listing"

# Date in the trailing path segment, e.g. views/2020-01-02.json
_KEY_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})[^/]*\Z", re.ASCII)


def dates_from_keys(entries: Iterable[Dict]) -> List[str]:
    """Extract YYYY-MM-DD dates from listing entries, dropping keys without one."""
    dates = []
    for entry in entries:
        match = _KEY_DATE_RE.search(entry.get('Key', ''))
        if match:
            dates.append(match.group(1))
    return dates


class LoadCoordinator:
    """Single-flight, dual-source loader for one Manifest."""

    def __init__(
        self,
        store,
        dates: DateSet,
        freshness: FreshnessCache,
        snapshot_key: str,
        views_prefix: str,
        on_changed: Callable[[], None],
        bucket: Optional[str] = None,
        grace_delay: float = GRACE_DELAY_SECONDS,
    ):
        """
        Args:
            store: RemoteStore (S3Client, LocalStore, or compatible)
            dates: DateSet to merge results into
            freshness: Freshness flag set after a successful load
            snapshot_key: Key of the persisted manifest
            views_prefix: Prefix listed when rebuilding
            on_changed: Called (from a worker thread) to persist dates the
                snapshot did not already contain
            bucket: Override the store's default bucket
            grace_delay: Head start given to the snapshot path, in seconds
        """
        self._store = store
        self._dates = dates
        self._freshness = freshness
        self._snapshot_key = snapshot_key
        self._views_prefix = views_prefix
        self._on_changed = on_changed
        self._bucket = bucket
        self.grace_delay = grace_delay
        self._inflight = InFlight()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="manifest-load")
        self._last_race: Optional[FirstCommit] = None

    @property
    def loading(self) -> bool:
        return self._inflight.active

    def load(self) -> None:
        """
        Ensure the DateSet reflects the store, unless it is still fresh.

        Raises:
            ManifestLoadError: If both the snapshot and the listing failed
        """
        if self._freshness.is_fresh():
            return

        future, leader = self._inflight.claim()
        if not leader:
            logger.debug("Joining in-flight manifest load")
            future.result()
            return

        if self._freshness.is_fresh():
            # Another load finished between the check above and the claim
            self._inflight.release()
            future.set_result(None)
            return

        try:
            winner = self._race()
        except Exception as e:
            self._inflight.release()
            future.set_exception(e)
            raise

        self._freshness.mark_fresh()
        self._inflight.release()
        future.set_result(None)
        logger.info(f"Manifest loaded from {winner}: {len(self._dates)} dates")

    def close(self) -> None:
        """Wait for any straggling path and stop the worker threads."""
        self._executor.shutdown(wait=True)

    def _race(self) -> str:
        previous = self._last_race
        if previous is not None and not previous.finished.is_set():
            # The previous loser is still talking to the store
            logger.debug("Waiting for previous load to finish before starting another")
            previous.finished.wait()

        race = FirstCommit(participants=2)
        self._last_race = race
        errors: Dict[str, BaseException] = {}

        self._executor.submit(self._run_path, SNAPSHOT_PATH, self._load_snapshot, race, errors)
        self._executor.submit(self._run_path, LISTING_PATH, self._load_listing, race, errors)

        race.settled.wait()
        winner = race.winner
        if winner is None:
            logger.error(f"Manifest load failed on both paths: {errors}")
            raise ManifestLoadError(errors)
        return winner

    def _run_path(self, name: str, fn, race: FirstCommit, errors: Dict[str, BaseException]) -> None:
        try:
            fn(race)
        except ManifestError as e:
            errors[name] = e
            logger.warning(f"Manifest {name} path failed: {e}")
        except Exception as e:
            errors[name] = e
            logger.exception(f"Manifest {name} path crashed: {e}")
        finally:
            race.done()

    def _load_snapshot(self, race: FirstCommit) -> None:
        data = self._store.get_object(self._snapshot_key, bucket=self._bucket)
        dates = decode_snapshot(data)
        changed = self._dates.merge(dates)
        if race.commit(SNAPSHOT_PATH):
            logger.debug(f"Snapshot path won with {len(dates)} dates")
        elif changed:
            logger.info("Late snapshot added dates missing from listing; saving")
            self._persist()

    def _load_listing(self, race: FirstCommit) -> None:
        if race.won.wait(self.grace_delay):
            logger.debug("Snapshot arrived within grace delay; skipping listing")
            return

        entries = self._store.list_objects(
            prefix=self._views_prefix,
            bucket=self._bucket,
            delimiter="/",
            max_keys=LIST_MAX_KEYS,
        )
        dates = dates_from_keys(entries)
        changed = self._dates.merge(dates)
        if race.commit(LISTING_PATH):
            logger.debug(f"Listing path won with {len(dates)} dates from {len(entries)} keys")
        if changed:
            logger.info(f"Listing found new dates ({len(dates)} listed); saving manifest")
            self._persist()

    def _persist(self) -> None:
        try:
            self._on_changed()
        except ManifestError as e:
            logger.error(f"Reconciling manifest after load failed: {e}")
