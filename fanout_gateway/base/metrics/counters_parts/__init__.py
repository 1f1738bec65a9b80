"""One-class-per-file implementations behind ``base.metrics.counters``."""

from .upstream_call_counters import UpstreamCallCounters
from .call_counters_snapshot import CallCountersSnapshot
from .latency_stats_snapshot import LatencyStatsSnapshot

__all__ = ["UpstreamCallCounters", "CallCountersSnapshot", "LatencyStatsSnapshot"]
