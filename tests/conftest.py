from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) in sys.path:
    sys.path.remove(str(_REPO_ROOT))
sys.path.insert(0, str(_REPO_ROOT))

import pytest

from view_manifest.errors import NotFoundError
from view_manifest.manifests import Manifest, decode_snapshot

# Short enough to keep the suite fast, long enough for an in-memory get to win
TEST_GRACE = 0.05


class FakeStore:
    """
    In-memory RemoteStore with call counters, injectable failures, and gates
    that hold a call open until the test releases it.
    """

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None, keys: Iterable[str] = ()):
        self.blobs: Dict[str, bytes] = dict(blobs or {})
        self.keys: List[str] = list(keys)
        self.get_calls = 0
        self.list_calls = 0
        self.put_calls = 0
        self.writes: List[List[str]] = []
        self.get_error: Optional[Exception] = None
        self.list_error: Optional[Exception] = None
        self.put_error: Optional[Exception] = None
        self.get_gate: Optional[threading.Event] = None
        self.put_gate: Optional[threading.Event] = None
        self.get_started = threading.Event()
        self.put_started = threading.Event()
        self.gets_in_flight = 0
        self.max_gets_in_flight = 0
        self._lock = threading.Lock()

    def get_object(self, key, bucket=None):
        with self._lock:
            self.get_calls += 1
            self.gets_in_flight += 1
            self.max_gets_in_flight = max(self.max_gets_in_flight, self.gets_in_flight)
        try:
            return self._get(key, bucket)
        finally:
            with self._lock:
                self.gets_in_flight -= 1

    def _get(self, key, bucket):
        self.get_started.set()
        if self.get_gate is not None:
            self.get_gate.wait(5)
        if self.get_error is not None:
            raise self.get_error
        if key not in self.blobs:
            raise NotFoundError(key, bucket)
        return self.blobs[key]

    def put_object(self, key, data, content_type=None, bucket=None):
        with self._lock:
            self.put_calls += 1
        self.put_started.set()
        if self.put_gate is not None:
            self.put_gate.wait(5)
        if self.put_error is not None:
            raise self.put_error
        with self._lock:
            self.blobs[key] = data
            self.writes.append(decode_snapshot(data))
        return "etag"

    def list_objects(self, prefix="", bucket=None, delimiter=None, max_keys=1000):
        with self._lock:
            self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        out = []
        for key in self.keys:
            if not key.startswith(prefix):
                continue
            if delimiter and delimiter in key[len(prefix):]:
                continue
            out.append({"Key": key})
        return out[:max_keys]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def make_manifest(store, clock):
    def _make(**kwargs):
        kwargs.setdefault("grace_delay", TEST_GRACE)
        kwargs.setdefault("clock", clock)
        return Manifest(store=store, **kwargs)
    return _make


@pytest.fixture()
def wait_until():
    """Poll a predicate until it holds or the timeout passes."""
    return _wait_until
