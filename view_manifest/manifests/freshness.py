"""
Short-lived "in-memory manifest is trustworthy" flag.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict

FRESHNESS_TTL_SECONDS = 120.0
FRESHNESS_CAPACITY = 1
CURRENT_KEY = "current"


class FreshnessCache:
    """
    Single-slot expiring flag owned by one Manifest.

    TTL and capacity are fixed policy. The clock is injectable so tests can
    move time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._expires_at: Dict[str, float] = {}

    def is_fresh(self) -> bool:
        with self._lock:
            expires_at = self._expires_at.get(CURRENT_KEY)
            if expires_at is None:
                return False
            if self._clock() >= expires_at:
                del self._expires_at[CURRENT_KEY]
                return False
            return True

    def mark_fresh(self) -> None:
        with self._lock:
            # Capacity 1: a new entry evicts whatever was there
            if len(self._expires_at) >= FRESHNESS_CAPACITY:
                self._expires_at.clear()
            self._expires_at[CURRENT_KEY] = self._clock() + FRESHNESS_TTL_SECONDS

    def invalidate(self) -> None:
        with self._lock:
            self._expires_at.clear()
