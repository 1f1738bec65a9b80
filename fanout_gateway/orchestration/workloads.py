"""Workload descriptions accepted by ``RequestOrchestrator.handle``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..base.aggregation import AggregationPolicy
from ..base.loop import WorkUnit, WorkUnits
from ..base.upstream import UpstreamCaller, UpstreamTarget


@dataclass(frozen=True)
class SingleCall:
    """One upstream call. ``caller`` overrides the orchestrator's default strategy."""

    target: UpstreamTarget
    caller: Optional[UpstreamCaller] = None
    kind: str = "single-call"


@dataclass(frozen=True)
class IterativeWork:
    """Sequential units run by a ``CooperativeLoop``."""

    units: WorkUnits
    name: str = "loop"
    progress_every: int = 1
    kind: str = "iterative"


@dataclass(frozen=True)
class FanOut:
    """Concurrent calls to ``targets`` aggregated under ``policy``."""

    targets: Sequence[UpstreamTarget]
    policy: AggregationPolicy = AggregationPolicy.BEST_EFFORT
    caller: Optional[UpstreamCaller] = None
    kind: str = "fan-out"


__all__ = ["SingleCall", "IterativeWork", "FanOut", "WorkUnit"]
