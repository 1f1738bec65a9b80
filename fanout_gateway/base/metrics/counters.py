"""Upstream call counters & aggregated timing utilities (re-export surface)."""

from .counters_parts import (
    UpstreamCallCounters,
    CallCountersSnapshot,
    LatencyStatsSnapshot,
)

__all__ = [
    "UpstreamCallCounters",
    "CallCountersSnapshot",
    "LatencyStatsSnapshot",
]
