"""Tests for ``RequestOrchestrator`` classification.

The orchestrator must tell a client that walked away (499) from a spent
deadline (504) from a failing provider (502), and reject malformed work
(400) before any upstream call starts.
"""
from __future__ import annotations

import asyncio

import pytest

from fanout_gateway.base.aggregation import AggregationPolicy
from fanout_gateway.base.cancellation import TriggerSource, cancellable_sleep
from fanout_gateway.base.errors import ErrorCode, GatewayLogicError, UpstreamError
from fanout_gateway.base.upstream import UpstreamTarget
from fanout_gateway.orchestration import (
    FanOut,
    InboundRequest,
    IterativeWork,
    RequestOrchestrator,
    ResponseClassification,
    SingleCall,
)


def _handle(orchestrator, workload, *, timeout_ms=None, abort_after=None, params=None):
    async def scenario():
        request = InboundRequest(params=params or {})
        if abort_after is not None:
            asyncio.get_running_loop().call_later(abort_after, request.abort_signal.trigger, TriggerSource.CALLER)
        return await orchestrator.handle(request, workload, timeout_ms)

    return asyncio.run(scenario())


def test_timeout_budget_yields_deadline_exceeded(cancellable_caller):
    orchestrator = RequestOrchestrator(cancellable_caller)
    response = _handle(orchestrator, SingleCall(UpstreamTarget("slow", latency_ms=5000)), timeout_ms=100)

    assert response.classification is ResponseClassification.DEADLINE_EXCEEDED  # nosec B101
    assert response.status_code == 504  # nosec B101
    assert response.elapsed_ms < 1000  # nosec B101
    assert response.body["outcome"]["cancelled_by"] == "timeout"  # nosec B101


def test_caller_abort_yields_client_closed_request(cancellable_caller):
    orchestrator = RequestOrchestrator(cancellable_caller)
    response = _handle(orchestrator, SingleCall(UpstreamTarget("slow", latency_ms=5000)), abort_after=0.1)

    assert response.classification is ResponseClassification.CLIENT_CLOSED_REQUEST  # nosec B101
    assert response.status_code == 499  # nosec B101
    assert response.elapsed_ms < 1000  # nosec B101


def test_caller_abort_before_deadline_wins(cancellable_caller):
    orchestrator = RequestOrchestrator(cancellable_caller)
    response = _handle(
        orchestrator,
        SingleCall(UpstreamTarget("slow", latency_ms=5000)),
        timeout_ms=500,
        abort_after=0.05,
    )
    assert response.classification is ResponseClassification.CLIENT_CLOSED_REQUEST  # nosec B101


def test_success_is_ok_with_payload(cancellable_caller):
    response = _handle(RequestOrchestrator(cancellable_caller), SingleCall(UpstreamTarget("fast", latency_ms=5)))

    assert response.ok is True and response.status_code == 200  # nosec B101
    body = response.to_dict()
    assert body["classification"] == "ok"  # nosec B101
    assert body["outcome"]["status"] == "succeeded"  # nosec B101
    assert "price" in body["outcome"]["payload"]  # nosec B101


def test_upstream_failure_is_distinct_from_cancellation(cancellable_caller, transport):
    transport.fail("broken", RuntimeError("internal error"))
    response = _handle(RequestOrchestrator(cancellable_caller), SingleCall(UpstreamTarget("broken", latency_ms=5)))

    assert response.classification is ResponseClassification.UPSTREAM_ERROR  # nosec B101
    assert response.status_code == 502  # nosec B101
    assert response.body["outcome"]["error"]["code"] == "server_error"  # nosec B101


def test_non_cancellable_call_override_ignores_deadline(cancellable_caller, non_cancellable_caller):
    orchestrator = RequestOrchestrator(cancellable_caller)
    response = _handle(
        orchestrator,
        SingleCall(UpstreamTarget("slow", latency_ms=200), caller=non_cancellable_caller),
        timeout_ms=20,
    )
    assert response.ok is True  # nosec B101
    assert response.elapsed_ms >= 150  # nosec B101


def test_iterative_work_stops_on_deadline():
    async def unit(signal):
        await cancellable_sleep(0.05, signal)
        return "done"

    orchestrator = RequestOrchestrator(caller=None)  # type: ignore[arg-type]
    response = _handle(orchestrator, IterativeWork(units=[unit] * 20), timeout_ms=130)

    assert response.classification is ResponseClassification.DEADLINE_EXCEEDED  # nosec B101
    report = response.body["report"]
    assert report["stopped_due_to"] == "timeout"  # nosec B101
    assert report["units_completed"] == 2  # nosec B101


def test_iterative_work_completes():
    async def unit(signal):
        return 1

    response = _handle(RequestOrchestrator(caller=None), IterativeWork(units=[unit] * 3))  # type: ignore[arg-type]
    assert response.ok is True  # nosec B101
    assert response.body["report"]["units_completed"] == 3  # nosec B101


def test_iterative_unit_upstream_error_is_classified():
    async def unit(signal):
        raise UpstreamError(code=ErrorCode.UNAVAILABLE, message="down", target="p")

    response = _handle(RequestOrchestrator(caller=None), IterativeWork(units=[unit]))  # type: ignore[arg-type]
    assert response.classification is ResponseClassification.UPSTREAM_ERROR  # nosec B101
    assert response.body["error"]["code"] == "unavailable"  # nosec B101


@pytest.mark.parametrize(
    "allow_partial, expected",
    [(True, ResponseClassification.OK), (False, ResponseClassification.UPSTREAM_ERROR)],
)
def test_partial_result_depends_on_allow_partial(cancellable_caller, transport, allow_partial, expected):
    transport.fail("b", RuntimeError("internal error"))
    orchestrator = RequestOrchestrator(cancellable_caller, allow_partial=allow_partial)
    targets = [UpstreamTarget("a", latency_ms=5), UpstreamTarget("b", latency_ms=5)]

    response = _handle(orchestrator, FanOut(targets))
    assert response.classification is expected  # nosec B101
    assert response.body["aggregate"]["status"] == "partial"  # nosec B101


def test_fan_out_deadline(cancellable_caller):
    targets = [UpstreamTarget(f"p{i}", latency_ms=1000) for i in range(3)]
    response = _handle(
        RequestOrchestrator(cancellable_caller),
        FanOut(targets, policy=AggregationPolicy.FAIL_FAST),
        timeout_ms=50,
    )
    assert response.classification is ResponseClassification.DEADLINE_EXCEEDED  # nosec B101


def test_fail_fast_failure_is_upstream_error(cancellable_caller, transport):
    transport.fail("b", RuntimeError("internal error"))
    targets = [UpstreamTarget("a", latency_ms=500), UpstreamTarget("b", latency_ms=5)]

    async def scenario():
        orchestrator = RequestOrchestrator(cancellable_caller)
        response = await orchestrator.handle(InboundRequest(), FanOut(targets, policy=AggregationPolicy.FAIL_FAST))
        await orchestrator.aggregator.drain()
        return response

    response = asyncio.run(scenario())
    assert response.classification is ResponseClassification.UPSTREAM_ERROR  # nosec B101
    assert response.body["aggregate"]["counts"]["not_awaited"] == 1  # nosec B101


def test_empty_fan_out_is_bad_request(cancellable_caller):
    response = _handle(RequestOrchestrator(cancellable_caller), FanOut([]))
    assert response.classification is ResponseClassification.BAD_REQUEST  # nosec B101
    assert response.status_code == 400  # nosec B101


def test_inbound_request_int_param_validation():
    request = InboundRequest(params={"days": "abc", "count": "-1", "ok": "7"})
    assert request.int_param("ok") == 7  # nosec B101
    assert request.int_param("missing", 3) == 3  # nosec B101
    with pytest.raises(GatewayLogicError):
        request.int_param("days")
    with pytest.raises(GatewayLogicError):
        request.int_param("count")
    with pytest.raises(GatewayLogicError):
        request.int_param("ok", maximum=5)


def test_partial_fan_out_cut_by_deadline_flags_deadline(cancellable_caller):
    targets = [UpstreamTarget("fast", latency_ms=10), UpstreamTarget("slow", latency_ms=2000)]
    response = _handle(RequestOrchestrator(cancellable_caller), FanOut(targets), timeout_ms=100)

    assert response.classification is ResponseClassification.OK  # nosec B101
    assert response.body["aggregate"]["status"] == "partial"  # nosec B101
    assert response.body["deadline_exceeded"] is True  # nosec B101
    assert response.to_dict()["deadline_exceeded"] is True  # nosec B101


def test_success_without_deadline_has_no_deadline_flag(cancellable_caller):
    response = _handle(RequestOrchestrator(cancellable_caller), SingleCall(UpstreamTarget("p", latency_ms=5)))
    assert "deadline_exceeded" not in response.body  # nosec B101


def test_drain_waits_for_orphans_of_overriding_caller(cancellable_caller, non_cancellable_caller, transport):
    transport.fail("b", RuntimeError("internal error"))
    targets = [UpstreamTarget("a", latency_ms=200), UpstreamTarget("b", latency_ms=5)]
    workload = FanOut(targets, policy=AggregationPolicy.FAIL_FAST, caller=non_cancellable_caller)

    async def scenario():
        orchestrator = RequestOrchestrator(cancellable_caller)
        first = await orchestrator.handle(InboundRequest(), workload)
        assert "a" not in transport.completed  # nosec B101
        await orchestrator.drain()
        return first

    response = asyncio.run(scenario())
    assert response.classification is ResponseClassification.UPSTREAM_ERROR  # nosec B101
    assert "a" in transport.completed  # nosec B101
