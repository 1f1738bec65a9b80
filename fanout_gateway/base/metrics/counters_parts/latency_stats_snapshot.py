"""Latency aggregate of terminal upstream calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LatencyStatsSnapshot:
    """Count, sum and range of the latencies sampled so far (ms).

    Successful and failed calls are sampled; cancelled calls are not, since
    their duration says more about the trigger than about the upstream.
    """

    count: int = 0
    total_ms: int = 0
    min_ms: Optional[int] = None
    max_ms: Optional[int] = None

    @property
    def avg_ms(self) -> Optional[float]:
        return self.total_ms / self.count if self.count else None

    def add(self, latency_ms: int) -> "LatencyStatsSnapshot":
        """Return the aggregate with one more sample; negative samples are ignored."""
        if latency_ms < 0:
            return self
        return LatencyStatsSnapshot(
            count=self.count + 1,
            total_ms=self.total_ms + latency_ms,
            min_ms=latency_ms if self.min_ms is None else min(self.min_ms, latency_ms),
            max_ms=latency_ms if self.max_ms is None else max(self.max_ms, latency_ms),
        )

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total_ms": self.total_ms,
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
            "avg_ms": self.avg_ms,
        }


__all__ = ["LatencyStatsSnapshot"]
