"""
Save coordinator: serializes snapshot writes and coalesces bursts.

While a write is in flight, every further save() joins one shared follow-up
cycle. When the in-flight write finishes the follow-up runs exactly once,
encoding the DateSet as it is at that moment. A burst of any size therefore
costs at most two writes, and the last one carries the latest state.
"""

from __future__ import annotations

import threading
from concurrent import futures
from concurrent.futures import Future
from typing import Optional

from loguru import logger

from .date_set import DateSet
from .snapshot import CONTENT_TYPE, encode_snapshot


class SaveCoordinator:
    """Single-writer for one Manifest's snapshot key."""

    def __init__(self, store, dates: DateSet, snapshot_key: str, bucket: Optional[str] = None):
        self._store = store
        self._dates = dates
        self._snapshot_key = snapshot_key
        self._bucket = bucket
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None
        self._follow_up: Optional[Future] = None

    @property
    def saving(self) -> bool:
        with self._lock:
            return self._inflight is not None

    @property
    def pending(self) -> bool:
        """Whether a follow-up write is queued behind the in-flight one."""
        with self._lock:
            return self._follow_up is not None

    def save(self) -> None:
        """
        Persist the DateSet, sharing work with concurrent callers.

        Raises:
            TransportError: If the write of the cycle this call joined failed
        """
        ahead: Optional[Future] = None
        with self._lock:
            if self._inflight is None:
                cycle = self._inflight = Future()
                drive = True
            elif self._follow_up is None:
                ahead = self._inflight
                cycle = self._follow_up = Future()
                drive = True
            else:
                cycle = self._follow_up
                drive = False

        if drive:
            if ahead is not None:
                logger.debug("Save in flight; queued follow-up write")
                futures.wait([ahead])
            self._write_cycle(cycle)
        cycle.result()

    def _write_cycle(self, cycle: Future) -> None:
        error: Optional[BaseException] = None
        dates = self._dates.to_list()
        try:
            self._store.put_object(
                self._snapshot_key,
                encode_snapshot(dates),
                content_type=CONTENT_TYPE,
                bucket=self._bucket,
            )
        except Exception as e:
            error = e
            logger.error(f"Manifest save failed for {self._snapshot_key}: {e}")
        else:
            logger.info(f"Manifest saved: {self._snapshot_key} ({len(dates)} dates)")

        with self._lock:
            # Hand the slot to the queued follow-up before waking anyone
            self._inflight = self._follow_up
            self._follow_up = None

        if error is not None:
            cycle.set_exception(error)
        else:
            cycle.set_result(None)
