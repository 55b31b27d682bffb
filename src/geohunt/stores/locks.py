"""
Per-document locks with bounded waits.

Store adapters serialize read-modify-write cycles on one document at a time, so
two teams (or two questions) never wait on each other. Lock acquisition is bounded
by the store timeout; an expired wait surfaces as `StoreUnavailable`.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from geohunt.domain.errors import StoreUnavailable


class KeyedLocks:
    def __init__(self, timeout_seconds: float):
        if float(timeout_seconds) <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self._timeout_seconds = float(timeout_seconds)
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        if not lock.acquire(timeout=self._timeout_seconds):
            raise StoreUnavailable(f"timed out after {self._timeout_seconds:.1f}s waiting for {key}")
        try:
            yield
        finally:
            lock.release()
