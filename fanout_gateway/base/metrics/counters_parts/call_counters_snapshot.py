"""Point-in-time view of ``UpstreamCallCounters``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .latency_stats_snapshot import LatencyStatsSnapshot


@dataclass(frozen=True)
class CallCountersSnapshot:
    """Immutable counters snapshot served by ``/api/metrics/summary``.

    ``cancelled_by_source`` is keyed by trigger source (``caller``,
    ``timeout``, ``aborted``) and ``failure_by_code`` by ``ErrorCode`` value.
    """

    scope: str
    total: int = 0
    success: int = 0
    failure: int = 0
    cancelled: int = 0
    in_flight: int = 0
    failure_by_code: Dict[str, int] = field(default_factory=dict)
    cancelled_by_source: Dict[str, int] = field(default_factory=dict)
    latency: LatencyStatsSnapshot = field(default_factory=LatencyStatsSnapshot)
    generated_at_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "total": self.total,
            "success": self.success,
            "failure": self.failure,
            "cancelled": self.cancelled,
            "in_flight": self.in_flight,
            "failure_by_code": dict(self.failure_by_code),
            "cancelled_by_source": dict(self.cancelled_by_source),
            "latency": self.latency.to_dict(),
            "generated_at_ms": self.generated_at_ms,
        }


__all__ = ["CallCountersSnapshot"]
