"""Thread-safe in-memory counters for upstream calls.

Every ``BaseUpstreamCaller.invoke`` records exactly one start and exactly one
terminal event (success, failure, or cancellation), so ``in_flight`` returns
to zero once all calls have been observed. The counters may be shared by
callers running on different threads.
"""

from __future__ import annotations

import time
from collections import Counter
from threading import Lock
from typing import Any, Dict, Optional

from .call_counters_snapshot import CallCountersSnapshot
from .latency_stats_snapshot import LatencyStatsSnapshot


class UpstreamCallCounters:
    """Lifecycle counters for one family of upstream calls."""

    def __init__(self, scope: str = "upstream") -> None:
        self._scope = scope
        self._lock = Lock()
        self._in_flight = 0
        self._reset()

    def _reset(self) -> None:
        self._started = 0
        self._failures: Counter[str] = Counter()
        self._cancellations: Counter[str] = Counter()
        self._success = 0
        self._latency = LatencyStatsSnapshot()

    @staticmethod
    def monotonic_ms() -> int:
        return int(time.monotonic() * 1000)

    def _finish(self) -> None:
        if self._in_flight > 0:
            self._in_flight -= 1

    def record_start(self) -> None:
        with self._lock:
            self._started += 1
            self._in_flight += 1

    def record_success(self, latency_ms: int) -> None:
        with self._lock:
            self._success += 1
            self._latency = self._latency.add(latency_ms)
            self._finish()

    def record_failure(self, error_code: str, latency_ms: Optional[int] = None) -> None:
        with self._lock:
            self._failures[error_code] += 1
            if latency_ms is not None:
                self._latency = self._latency.add(latency_ms)
            self._finish()

    def record_cancelled(self, source: str) -> None:
        """Count a cancellation under its trigger source; no latency sample."""
        with self._lock:
            self._cancellations[source] += 1
            self._finish()

    def snapshot(self, reset: bool = False) -> CallCountersSnapshot:
        """Return the current counters; ``reset`` zeroes all but ``in_flight``."""
        with self._lock:
            snap = CallCountersSnapshot(
                scope=self._scope,
                total=self._started,
                success=self._success,
                failure=sum(self._failures.values()),
                cancelled=sum(self._cancellations.values()),
                in_flight=self._in_flight,
                failure_by_code=dict(self._failures),
                cancelled_by_source=dict(self._cancellations),
                latency=self._latency,
                generated_at_ms=self.monotonic_ms(),
            )
            if reset:
                self._reset()
        return snap

    def as_dict(self, reset: bool = False) -> Dict[str, Any]:
        return self.snapshot(reset=reset).to_dict()


__all__ = ["UpstreamCallCounters"]
