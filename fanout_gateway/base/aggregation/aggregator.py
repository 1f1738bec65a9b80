"""Concurrent fan-out of upstream calls with policy-driven aggregation.

All calls are created as tasks before any of them is awaited, so the duration
of a successful aggregation tracks the slowest call rather than the sum of
latencies. Every call observes a child signal linked to the caller's signal.

Orphaned calls
--------------
When a fail-fast aggregation short-circuits, calls still in flight are not
force-cancelled. The child signal is triggered with ``TriggerSource.ABORTED``
so cancellable calls stop at their next suspension point; non-cancellable
calls run to completion in the background. Either way their outcomes are
discarded (logged as ``call.discarded``) and reported as ``not_awaited``.
"""

from __future__ import annotations

import asyncio
import time
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..cancellation import CancellationSignal, TriggerSource
from ..errors import GatewayLogicError
from ..logging import LogContext, get_logger, normalized_log_event
from ..upstream import CallOutcome, UpstreamCaller, UpstreamTarget
from .aggregated_result import AggregatedResult
from .policy import AggregationPolicy


class FanOutAggregator:
    """Issue one call per target concurrently and aggregate the outcomes."""

    def __init__(self, caller: UpstreamCaller, *, ctx: Optional[LogContext] = None) -> None:
        self._caller = caller
        self._ctx = ctx or LogContext(operation="fan-out")
        self._logger = get_logger("gateway.aggregation")
        self._orphans: Set[asyncio.Task] = set()

    @property
    def caller(self) -> UpstreamCaller:
        return self._caller

    @property
    def orphaned_calls(self) -> int:
        """Calls abandoned by a fail-fast short-circuit that are still running."""
        return len(self._orphans)

    async def aggregate(
        self,
        targets: Iterable[UpstreamTarget],
        signal: CancellationSignal,
        policy: AggregationPolicy = AggregationPolicy.BEST_EFFORT,
        *,
        ctx: Optional[LogContext] = None,
    ) -> AggregatedResult:
        """Call every target concurrently under ``signal`` and ``policy``.

        Raises:
            GatewayLogicError: ``targets`` is empty.
        """
        targets = tuple(targets)
        if not targets:
            raise GatewayLogicError("fan-out requires at least one target")
        policy = AggregationPolicy.parse(policy)
        log_ctx = ctx or self._ctx
        started = time.monotonic()
        normalized_log_event(
            self._logger,
            "aggregation.started",
            log_ctx,
            phase="start",
            elapsed_ms=0,
            policy=policy.value,
            targets=[t.name for t in targets],
        )
        child = signal.child()
        tasks: List[asyncio.Task] = [
            asyncio.create_task(self._caller.invoke(t, child, ctx=log_ctx), name=f"upstream:{t.name}")
            for t in targets
        ]
        try:
            if policy is AggregationPolicy.BEST_EFFORT:
                outcomes = list(await asyncio.gather(*tasks))
                cause = None
            else:
                outcomes, cause = await self._fail_fast(targets, tasks, child)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        finally:
            child.dispose()

        result = AggregatedResult.build(
            policy,
            outcomes,
            cause=cause,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        normalized_log_event(
            self._logger,
            "aggregation.completed",
            log_ctx,
            phase="finalize",
            elapsed_ms=result.elapsed_ms,
            cancelled_by=result.cancelled_by,
            error_code=result.cause.error.code.value if result.cause and result.cause.error else None,
            status=result.status.value,
            succeeded=result.succeeded,
            failed=result.failed,
            cancelled=result.cancelled,
            not_awaited=result.not_awaited,
        )
        return result

    async def _fail_fast(
        self,
        targets: Tuple[UpstreamTarget, ...],
        tasks: List[asyncio.Task],
        child: CancellationSignal,
    ) -> Tuple[List[CallOutcome], Optional[CallOutcome]]:
        index: Dict[asyncio.Task, int] = {task: i for i, task in enumerate(tasks)}
        outcomes: List[Optional[CallOutcome]] = [None] * len(tasks)
        pending: Set[asyncio.Task] = set(tasks)
        cause: Optional[CallOutcome] = None
        while pending and cause is None:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            # Calls finishing in the same tick are judged in issuance order.
            for task in sorted(done, key=index.__getitem__):
                outcome: CallOutcome = task.result()
                outcomes[index[task]] = outcome
                if cause is None and not outcome.ok:
                    cause = outcome
        if pending and cause is not None:
            child.trigger(
                TriggerSource.ABORTED,
                f"fail-fast: {cause.target.name} {cause.status.value}",
            )
            for task in pending:
                outcomes[index[task]] = CallOutcome.not_awaited(targets[index[task]])
                self._orphan(task)
        return [o for o in outcomes if o is not None], cause

    def _orphan(self, task: asyncio.Task) -> None:
        self._orphans.add(task)
        task.add_done_callback(self._discard)

    def _discard(self, task: asyncio.Task) -> None:
        self._orphans.discard(task)
        if task.cancelled():
            normalized_log_event(self._logger, "call.discarded", self._ctx, phase="discard", status="task_cancelled")
            return
        exc = task.exception()
        if exc is not None:
            normalized_log_event(
                self._logger,
                "call.discarded",
                self._ctx,
                phase="discard",
                status="error",
                message=str(exc),
            )
            return
        outcome: CallOutcome = task.result()
        normalized_log_event(
            self._logger,
            "call.discarded",
            self._ctx.for_target(outcome.target.name),
            phase="discard",
            elapsed_ms=outcome.elapsed_ms,
            cancelled_by=outcome.cancelled_by,
            status=outcome.status.value,
        )

    async def drain(self) -> None:
        """Wait for orphaned calls to finish (tests and shutdown)."""
        if self._orphans:
            await asyncio.gather(*list(self._orphans), return_exceptions=True)


__all__ = ["FanOutAggregator"]
