"""
Small concurrency primitives shared by the load and save coordinators.

Provides:
- InFlight: at most one running operation, shared by every concurrent caller
- FirstCommit: single-assignment slot deciding which racing path won
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Optional, Tuple


class InFlight:
    """Process-local single-flight slot.

    The first caller to ``claim`` becomes the leader and must later call
    ``release``; everyone else gets the leader's Future to wait on.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._future: Optional[Future] = None

    def claim(self) -> Tuple[Future, bool]:
        with self._lock:
            if self._future is not None:
                return self._future, False
            self._future = Future()
            return self._future, True

    def release(self) -> None:
        with self._lock:
            self._future = None

    @property
    def active(self) -> bool:
        with self._lock:
            return self._future is not None


class FirstCommit:
    """Compare-and-set winner slot plus a settled signal.

    ``settled`` fires when a path commits, or when every participant has
    finished without committing. ``finished`` fires once every participant
    has returned, winner or not.
    """

    def __init__(self, participants: int) -> None:
        self._lock = threading.Lock()
        self._winner: Optional[str] = None
        self._remaining = participants
        self.won = threading.Event()
        self.settled = threading.Event()
        self.finished = threading.Event()

    def commit(self, name: str) -> bool:
        with self._lock:
            if self._winner is not None:
                return False
            self._winner = name
        self.won.set()
        self.settled.set()
        return True

    def done(self) -> None:
        with self._lock:
            self._remaining -= 1
            finished = self._remaining <= 0
        if finished:
            self.settled.set()
            self.finished.set()

    @property
    def winner(self) -> Optional[str]:
        with self._lock:
            return self._winner
