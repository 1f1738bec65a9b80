"""Tests for ``FanOutAggregator`` policies, ordering and concurrency."""
from __future__ import annotations

import asyncio
import time

import pytest

from fanout_gateway.base.aggregation import AggregateStatus, AggregationPolicy, FanOutAggregator
from fanout_gateway.base.cancellation import CancellationSignal, TriggerSource
from fanout_gateway.base.errors import GatewayLogicError
from fanout_gateway.base.upstream import OutcomeStatus, UpstreamTarget


def _targets(*latencies):
    return [UpstreamTarget(f"p{i}", latency_ms=ms) for i, ms in enumerate(latencies)]


def test_best_effort_keeps_issuance_order_and_runs_concurrently(cancellable_caller):
    aggregator = FanOutAggregator(cancellable_caller)
    targets = _targets(300, 100, 200)

    async def scenario():
        began = time.monotonic()
        result = await aggregator.aggregate(targets, CancellationSignal())
        return result, time.monotonic() - began

    result, elapsed = asyncio.run(scenario())
    assert result.status is AggregateStatus.SUCCEEDED  # nosec B101
    assert [o.target.name for o in result.outcomes] == ["p0", "p1", "p2"]  # nosec B101
    assert len(result.payloads) == 3  # nosec B101
    # Max of the latencies, not their sum (600ms).
    assert 0.28 <= elapsed < 0.5  # nosec B101


def test_best_effort_partial_failure_is_recorded_per_target(cancellable_caller, transport):
    transport.fail("p1", RuntimeError("internal error"))
    aggregator = FanOutAggregator(cancellable_caller)

    result = asyncio.run(aggregator.aggregate(_targets(20, 10, 30), CancellationSignal()))

    assert result.status is AggregateStatus.PARTIAL  # nosec B101
    assert (result.succeeded, result.failed) == (2, 1)  # nosec B101
    assert result.cause.target.name == "p1"  # nosec B101
    assert [o.status for o in result.outcomes] == [  # nosec B101
        OutcomeStatus.SUCCEEDED,
        OutcomeStatus.FAILED,
        OutcomeStatus.SUCCEEDED,
    ]


def test_best_effort_all_failed(cancellable_caller, transport):
    for name in ("p0", "p1"):
        transport.fail(name, RuntimeError("service unavailable"))
    result = asyncio.run(FanOutAggregator(cancellable_caller).aggregate(_targets(5, 5), CancellationSignal()))
    assert result.status is AggregateStatus.FAILED  # nosec B101
    assert result.payloads == ()  # nosec B101


def test_fail_fast_short_circuits_on_first_failure(cancellable_caller, transport):
    transport.fail("p1", RuntimeError("internal error"))
    aggregator = FanOutAggregator(cancellable_caller)

    async def scenario():
        began = time.monotonic()
        result = await aggregator.aggregate(
            _targets(400, 50, 500),
            CancellationSignal(),
            AggregationPolicy.FAIL_FAST,
        )
        elapsed = time.monotonic() - began
        await aggregator.drain()
        return result, elapsed

    result, elapsed = asyncio.run(scenario())
    assert elapsed < 0.3  # nosec B101
    assert result.status is AggregateStatus.FAILED  # nosec B101
    assert result.cause.target.name == "p1"  # nosec B101
    assert [o.status for o in result.outcomes] == [  # nosec B101
        OutcomeStatus.NOT_AWAITED,
        OutcomeStatus.FAILED,
        OutcomeStatus.NOT_AWAITED,
    ]
    assert result.not_awaited == 2  # nosec B101
    # Orphans observed the aborted child signal and stopped their I/O.
    assert sorted(transport.cancelled) == ["p0", "p2"]  # nosec B101
    assert aggregator.orphaned_calls == 0  # nosec B101


def test_fail_fast_orphans_of_non_cancellable_caller_run_to_completion(non_cancellable_caller, transport):
    transport.fail("p1", RuntimeError("internal error"))
    aggregator = FanOutAggregator(non_cancellable_caller)

    async def scenario():
        result = await aggregator.aggregate(_targets(150, 10, 150), CancellationSignal(), "fail-fast")
        in_flight = aggregator.orphaned_calls
        await aggregator.drain()
        return result, in_flight

    result, in_flight = asyncio.run(scenario())
    assert result.status is AggregateStatus.FAILED  # nosec B101
    assert in_flight == 2  # nosec B101
    assert sorted(transport.completed) == ["p0", "p1", "p2"]  # nosec B101


def test_fail_fast_tie_is_broken_by_issuance_order(cancellable_caller, transport):
    transport.fail("p1", RuntimeError("internal error"))
    transport.fail("p2", RuntimeError("not found"))
    result = asyncio.run(
        FanOutAggregator(cancellable_caller).aggregate(
            _targets(200, 20, 20),
            CancellationSignal(),
            AggregationPolicy.FAIL_FAST,
        )
    )
    assert result.cause.target.name == "p1"  # nosec B101


def test_fail_fast_all_succeeded(cancellable_caller):
    result = asyncio.run(
        FanOutAggregator(cancellable_caller).aggregate(_targets(10, 5), CancellationSignal(), AggregationPolicy.FAIL_FAST)
    )
    assert result.status is AggregateStatus.SUCCEEDED  # nosec B101
    assert result.cause is None  # nosec B101


def test_caller_abort_cancels_every_call(cancellable_caller, transport):
    async def scenario():
        signal = CancellationSignal()
        asyncio.get_running_loop().call_later(0.05, signal.trigger, TriggerSource.CALLER)
        return await FanOutAggregator(cancellable_caller).aggregate(_targets(1000, 1000, 1000), signal)

    result = asyncio.run(scenario())
    assert result.status is AggregateStatus.CANCELLED  # nosec B101
    assert result.cancelled == 3  # nosec B101
    assert result.cancelled_by is TriggerSource.CALLER  # nosec B101
    assert result.elapsed_ms < 500  # nosec B101
    assert len(transport.cancelled) == 3  # nosec B101


def test_fail_fast_cancelled_by_timeout(cancellable_caller):
    async def scenario():
        signal = CancellationSignal()
        signal.cancel_after(0.05)
        return await FanOutAggregator(cancellable_caller).aggregate(
            _targets(1000, 1000),
            signal,
            AggregationPolicy.FAIL_FAST,
        )

    result = asyncio.run(scenario())
    assert result.status is AggregateStatus.CANCELLED  # nosec B101
    assert result.cancelled_by is TriggerSource.TIMEOUT  # nosec B101


def test_empty_target_list_is_a_logic_error(cancellable_caller):
    with pytest.raises(GatewayLogicError):
        asyncio.run(FanOutAggregator(cancellable_caller).aggregate([], CancellationSignal()))


def test_unknown_policy_is_rejected(cancellable_caller):
    with pytest.raises(ValueError):
        asyncio.run(FanOutAggregator(cancellable_caller).aggregate(_targets(1), CancellationSignal(), "sometimes"))


def test_result_serializes_counts_and_cause(cancellable_caller, transport):
    transport.fail("p0", RuntimeError("internal error"))
    result = asyncio.run(FanOutAggregator(cancellable_caller).aggregate(_targets(5, 5), CancellationSignal()))
    data = result.to_dict()
    assert data["status"] == "partial"  # nosec B101
    assert data["counts"] == {"succeeded": 1, "failed": 1, "cancelled": 0, "not_awaited": 0}  # nosec B101
    assert data["cause"]["error"]["code"] == "server_error"  # nosec B101
