"""In-memory metrics for upstream calls."""

from .counters import CallCountersSnapshot, LatencyStatsSnapshot, UpstreamCallCounters

__all__ = ["UpstreamCallCounters", "CallCountersSnapshot", "LatencyStatsSnapshot"]
