"""
Per-route request timing.

The health endpoint reports a running average of handler latency per route so an
operator can spot a slow store during an event. Owned by the app, not global.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass
class RouteTiming:
    avg_ms: float = 0.0
    count: int = 0

    def add(self, ms: float) -> None:
        self.count += 1
        self.avg_ms += (float(ms) - self.avg_ms) / self.count

    def as_dict(self) -> dict[str, float | int]:
        return {"avg_ms": round(self.avg_ms, 3), "count": int(self.count)}


class PerfMonitor:
    def __init__(self) -> None:
        self._timings: dict[str, RouteTiming] = {}
        self._lock = threading.Lock()

    def record(self, key: str, ms: float) -> None:
        if not key:
            return
        with self._lock:
            self._timings.setdefault(key, RouteTiming()).add(ms)

    def as_dict(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {k: t.as_dict() for k, t in sorted(self._timings.items())}
