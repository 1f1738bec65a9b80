"""Request orchestration over the cancellation core.

Purpose:
    Glue one inbound request to a request-scoped ``CancellationSignal`` and run
    a workload under it: a single upstream call, a cooperative loop, or a
    fan-out aggregation. The terminal state of the workload is classified into
    a ``GatewayResponse``.

Signal lifecycle:
    The request signal is linked to ``InboundRequest.abort_signal`` (caller
    abort) and, when a budget is given, armed with a ``TIMEOUT`` timer. It is
    disposed when ``handle`` returns, which disarms the timer and detaches the
    signal from the abort signal.

Classification:
    success -> ``ok``; cancelled by caller -> ``client_closed_request``;
    cancelled by timeout -> ``deadline_exceeded``; upstream failure ->
    ``upstream_error``; ``GatewayLogicError`` -> ``bad_request``. A best-effort
    ``partial`` aggregation is ``ok`` only while ``allow_partial`` is set.
    Whenever the request deadline fired the body also carries
    ``"deadline_exceeded": true``.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple, Union

from ..base.aggregation import AggregateStatus, AggregatedResult, FanOutAggregator
from ..base.cancellation import CancellationSignal, TriggerSource
from ..base.errors import GatewayLogicError, UpstreamError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.loop import CooperativeLoop
from ..base.timeouts import budget_seconds
from ..base.upstream import CallOutcome, OutcomeStatus, UpstreamCaller
from .inbound_request import InboundRequest
from .response import GatewayResponse, ResponseClassification
from .workloads import FanOut, IterativeWork, SingleCall

Workload = Union[SingleCall, IterativeWork, FanOut]
_Result = Tuple[ResponseClassification, Dict[str, Any]]


class RequestOrchestrator:
    """Run workloads for inbound requests and classify the results."""

    def __init__(
        self,
        caller: UpstreamCaller,
        *,
        aggregator: Optional[FanOutAggregator] = None,
        allow_partial: bool = True,
    ) -> None:
        self._caller = caller
        self._aggregator = aggregator or FanOutAggregator(caller)
        self._aggregators: Dict[UpstreamCaller, FanOutAggregator] = {}
        self._allow_partial = allow_partial
        self._logger = get_logger("gateway.orchestration")

    @property
    def caller(self) -> UpstreamCaller:
        return self._caller

    @property
    def aggregator(self) -> FanOutAggregator:
        return self._aggregator

    @property
    def allow_partial(self) -> bool:
        return self._allow_partial

    def _aggregator_for(self, caller: Optional[UpstreamCaller]) -> FanOutAggregator:
        if caller is None or caller is self._caller:
            return self._aggregator
        aggregator = self._aggregators.get(caller)
        if aggregator is None:
            aggregator = self._aggregators[caller] = FanOutAggregator(caller)
        return aggregator

    async def drain(self) -> None:
        """Wait for orphaned fan-out calls of every aggregator this orchestrator used."""
        await self._aggregator.drain()
        for aggregator in list(self._aggregators.values()):
            await aggregator.drain()

    async def handle(
        self,
        request: InboundRequest,
        workload: Workload,
        timeout_ms: Optional[int] = None,
    ) -> GatewayResponse:
        """Run ``workload`` for ``request`` and return the classified response.

        Exceptions other than ``GatewayLogicError`` and ``UpstreamError``
        raised by loop units propagate unchanged.
        """
        started = time.monotonic()
        ctx = LogContext(request_id=request.request_id, operation=workload.kind)
        with CancellationSignal.linked(request.abort_signal) as signal:
            normalized_log_event(
                self._logger,
                "request.started",
                ctx,
                phase="start",
                elapsed_ms=0,
                timeout_ms=timeout_ms,
            )
            try:
                budget = budget_seconds(timeout_ms)
                if budget is not None:
                    signal.cancel_after(budget, f"request budget of {timeout_ms}ms exceeded")
                classification, body = await self._run(workload, signal, ctx)
            except GatewayLogicError as exc:
                classification, body = ResponseClassification.BAD_REQUEST, {"error": {"message": str(exc)}}
            except UpstreamError as exc:
                classification, body = ResponseClassification.UPSTREAM_ERROR, {"error": exc.to_dict()}
            if signal.source is TriggerSource.TIMEOUT:
                # Also set when a partial result is still classified ok.
                body = {**body, "deadline_exceeded": True}
            response = GatewayResponse(
                classification=classification,
                body=body,
                elapsed_ms=int((time.monotonic() - started) * 1000),
                request_id=request.request_id,
            )
            normalized_log_event(
                self._logger,
                "request.completed",
                ctx,
                phase="finalize",
                elapsed_ms=response.elapsed_ms,
                cancelled_by=signal.source if signal.triggered else None,
                classification=response.classification.value,
                status_code=response.status_code,
            )
        return response

    async def _run(self, workload: Workload, signal: CancellationSignal, ctx: LogContext) -> _Result:
        if isinstance(workload, SingleCall):
            caller = workload.caller or self._caller
            outcome = await caller.invoke(workload.target, signal, ctx=ctx)
            return _classify_outcome(outcome), {"outcome": outcome.to_dict()}
        if isinstance(workload, IterativeWork):
            loop = CooperativeLoop(
                signal,
                name=workload.name,
                ctx=ctx,
                progress_every=workload.progress_every,
            )
            report = await loop.run(workload.units)
            if report.completed:
                classification = ResponseClassification.OK
            else:
                classification = ResponseClassification.for_cancellation(report.stopped_due_to)
            return classification, {"report": report.to_dict()}
        if isinstance(workload, FanOut):
            aggregator = self._aggregator_for(workload.caller)
            result = await aggregator.aggregate(workload.targets, signal, workload.policy, ctx=ctx)
            return self._classify_aggregate(result), {"aggregate": result.to_dict()}
        raise GatewayLogicError(f"unsupported workload: {type(workload).__name__}")

    def _classify_aggregate(self, result: AggregatedResult) -> ResponseClassification:
        if result.status is AggregateStatus.SUCCEEDED:
            return ResponseClassification.OK
        if result.status is AggregateStatus.PARTIAL:
            return ResponseClassification.OK if self._allow_partial else ResponseClassification.UPSTREAM_ERROR
        if result.status is AggregateStatus.CANCELLED:
            return ResponseClassification.for_cancellation(result.cancelled_by or TriggerSource.ABORTED)
        return ResponseClassification.UPSTREAM_ERROR


def _classify_outcome(outcome: CallOutcome) -> ResponseClassification:
    if outcome.ok:
        return ResponseClassification.OK
    if outcome.status is OutcomeStatus.CANCELLED and outcome.cancelled_by is not None:
        return ResponseClassification.for_cancellation(outcome.cancelled_by)
    return ResponseClassification.UPSTREAM_ERROR


def response_body(response: GatewayResponse, message: Optional[str] = None) -> Dict[str, Any]:
    """JSON body for ``response`` with an optional human-readable message."""
    body = response.to_dict()
    if message is not None:
        body = {"message": message, **body}
    return body


__all__ = ["RequestOrchestrator", "Workload", "response_body"]
