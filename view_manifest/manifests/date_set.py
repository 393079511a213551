"""
Sorted, de-duplicated set of ISO dates (YYYY-MM-DD).

ISO date strings order lexically the same way they order chronologically, so
plain string comparison and bisect are enough.
"""

from __future__ import annotations

import bisect
import threading
from typing import Iterable, List


class DateSet:
    """Thread-safe sorted date list with merge and range queries."""

    def __init__(self, dates: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._dates: List[str] = sorted(set(dates))

    def range_before(self, date: str, limit: int) -> List[str]:
        """Up to ``limit`` dates strictly before ``date``, ascending."""
        if limit <= 0:
            return []
        with self._lock:
            index = bisect.bisect_left(self._dates, date)
            return self._dates[max(0, index - limit):index]

    def merge(self, new_dates: Iterable[str]) -> bool:
        """
        Union ``new_dates`` into the set.

        Returns:
            True if the set changed
        """
        with self._lock:
            combined = sorted(set(self._dates).union(new_dates))
            if combined == self._dates:
                return False
            self._dates = combined
            return True

    def insert_sorted(self, date: str) -> bool:
        with self._lock:
            index = bisect.bisect_left(self._dates, date)
            if index < len(self._dates) and self._dates[index] == date:
                return False
            self._dates.insert(index, date)
            return True

    def to_list(self) -> List[str]:
        with self._lock:
            return list(self._dates)

    def __contains__(self, date: object) -> bool:
        with self._lock:
            index = bisect.bisect_left(self._dates, date)
            return index < len(self._dates) and self._dates[index] == date

    def __len__(self) -> int:
        with self._lock:
            return len(self._dates)

    def __repr__(self) -> str:
        return f"DateSet({self.to_list()!r})"
