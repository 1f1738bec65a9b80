"""Build orchestrator workloads from demo query parameters.

Each builder reads its parameters through ``InboundRequest.int_param`` so a
malformed value surfaces as ``GatewayLogicError`` (400) before any upstream
work starts.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterator, List

from fanout_gateway.base.aggregation import AggregationPolicy
from fanout_gateway.base.cancellation import CancellationSignal, cancellable_sleep
from fanout_gateway.base.errors import GatewayLogicError
from fanout_gateway.base.loop import WorkUnit
from fanout_gateway.base.upstream import UpstreamCaller, UpstreamTarget
from fanout_gateway.config.defaults import (
    COMBINATIONS_PER_DAY,
    DEFAULT_AGGREGATE_DELAY_MS,
    DEFAULT_LOOP_DAYS,
    DEFAULT_LOOP_UNIT_DELAY_MS,
    DEFAULT_PROVIDER_COUNT,
    DEFAULT_SLOW_PROVIDER_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
    LOOP_PROGRESS_EVERY,
    MAX_PROVIDER_COUNT,
    PARALLEL_DEMO_LATENCIES_MS,
)
from fanout_gateway.orchestration import FanOut, InboundRequest, IterativeWork, SingleCall


def provider_delay(request: InboundRequest, default: int = DEFAULT_SLOW_PROVIDER_DELAY_MS) -> int:
    return request.int_param("providerDelayMs", default)


def single_call(request: InboundRequest, caller: UpstreamCaller | None = None) -> SingleCall:
    """One slow provider call (``providerDelayMs``, default 5000ms)."""
    return SingleCall(UpstreamTarget("provider", latency_ms=provider_delay(request)), caller=caller)


def timeout_budget(request: InboundRequest) -> int:
    return request.int_param("timeoutMs", DEFAULT_TIMEOUT_MS)


def _combination_units(days: int, unit_delay_ms: int, cooperative: bool) -> Iterator[WorkUnit]:
    def make(day: int) -> Callable[[CancellationSignal], Any]:
        async def unit(signal: CancellationSignal) -> str:
            if cooperative:
                await cancellable_sleep(unit_delay_ms / 1000.0, signal)
            else:
                await asyncio.sleep(unit_delay_ms / 1000.0)
            return f"Day {day}: Processed {COMBINATIONS_PER_DAY} flight combinations"

        return unit

    for day in range(1, days + 1):
        yield make(day)


def combinations(request: InboundRequest, *, cooperative: bool) -> IterativeWork:
    """``days`` units of ``unitDelayMs`` each; only the cooperative variant honours the signal."""
    days = request.int_param("days", DEFAULT_LOOP_DAYS)
    unit_delay_ms = request.int_param("unitDelayMs", DEFAULT_LOOP_UNIT_DELAY_MS)
    return IterativeWork(
        units=_combination_units(days, unit_delay_ms, cooperative),
        name="combinations" if cooperative else "combinations-uncooperative",
        progress_every=LOOP_PROGRESS_EVERY,
    )


def _policy(request: InboundRequest) -> AggregationPolicy:
    raw = request.str_param("policy", AggregationPolicy.BEST_EFFORT.value)
    try:
        return AggregationPolicy.parse(raw)
    except ValueError as exc:
        raise GatewayLogicError(str(exc)) from exc


def aggregate(request: InboundRequest) -> FanOut:
    """``providerCount`` identical providers of ``providerDelayMs`` each."""
    count = request.int_param("providerCount", DEFAULT_PROVIDER_COUNT, minimum=1, maximum=MAX_PROVIDER_COUNT)
    delay = provider_delay(request, DEFAULT_AGGREGATE_DELAY_MS)
    targets: List[UpstreamTarget] = [
        UpstreamTarget(f"provider-{i}", latency_ms=delay) for i in range(1, count + 1)
    ]
    return FanOut(targets, policy=_policy(request))


def parallel(request: InboundRequest) -> FanOut:
    """Three providers with staggered latencies; total time tracks the slowest."""
    targets = [
        UpstreamTarget(f"Provider{i}", latency_ms=latency)
        for i, latency in enumerate(PARALLEL_DEMO_LATENCIES_MS, start=1)
    ]
    return FanOut(targets, policy=_policy(request))


__all__ = [
    "single_call",
    "timeout_budget",
    "combinations",
    "aggregate",
    "parallel",
]
