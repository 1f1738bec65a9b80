"""Cooperative loop over sequential units of work.

The loop checks its ``CancellationSignal`` before pulling and starting each
unit and never starts a unit after the signal has triggered. It does not
interrupt a unit already running: a unit that honours the signal (for example
by awaiting through ``run_cancellable``) stops on its own and raises
``CancelledError``; a unit that ignores it runs to completion and the loop
stops at the next check.
"""

from __future__ import annotations

import time
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable, List, Union

from ..cancellation import CancellationSignal, CancelledError, TriggerSource
from ..logging import LogContext, get_logger, normalized_log_event
from .loop_report import LoopReport

WorkUnit = Callable[[CancellationSignal], Awaitable[Any]]
WorkUnits = Union[Iterable[WorkUnit], AsyncIterable[WorkUnit]]


async def _from_sync(units: Iterable[WorkUnit]) -> AsyncIterator[WorkUnit]:
    iterator = iter(units)
    try:
        for unit in iterator:
            yield unit
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()


def _as_async_iterator(units: WorkUnits) -> AsyncIterator[WorkUnit]:
    if hasattr(units, "__aiter__"):
        return units.__aiter__()  # type: ignore[union-attr]
    return _from_sync(units).__aiter__()  # type: ignore[arg-type]


class CooperativeLoop:
    """Run work units strictly in order under a cancellation signal.

    Each unit is an async callable receiving the loop's signal. Units may be
    supplied as a finite list, a generator, or an unbounded async iterator;
    the next unit is only pulled after the signal check passes.

    Exceptions other than ``CancelledError`` raised by a unit propagate to the
    caller unchanged; the loop does not translate failures.
    """

    def __init__(
        self,
        signal: CancellationSignal,
        *,
        name: str = "loop",
        ctx: LogContext | None = None,
        progress_every: int = 1,
    ) -> None:
        self._signal = signal
        self._name = name
        self._ctx = ctx or LogContext(operation=name)
        self._progress_every = max(1, progress_every)
        self._logger = get_logger("gateway.loop")

    @property
    def signal(self) -> CancellationSignal:
        return self._signal

    async def run(self, units: WorkUnits) -> LoopReport:
        """Execute ``units`` until exhausted or until the signal triggers."""
        started = time.monotonic()
        results: List[Any] = []
        iterator = _as_async_iterator(units)
        normalized_log_event(self._logger, "loop.started", self._ctx, phase="start", elapsed_ms=0)
        try:
            return await self._drive(iterator, results, started)
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _drive(self, iterator: AsyncIterator[WorkUnit], results: List[Any], started: float) -> LoopReport:
        while True:
            if self._signal.triggered:
                return self._stopped(results, self._signal.source, started)
            try:
                unit = await iterator.__anext__()
            except StopAsyncIteration:
                break
            try:
                result = await unit(self._signal)
            except CancelledError as exc:
                return self._stopped(results, exc.source, started)
            results.append(result)
            if len(results) % self._progress_every == 0:
                normalized_log_event(
                    self._logger,
                    "loop.unit.completed",
                    self._ctx,
                    phase="progress",
                    elapsed_ms=_elapsed_ms(started),
                    unit=len(results),
                )
        report = LoopReport(
            units_completed=len(results),
            results=tuple(results),
            elapsed_ms=_elapsed_ms(started),
        )
        normalized_log_event(
            self._logger,
            "loop.stopped",
            self._ctx,
            phase="finalize",
            elapsed_ms=report.elapsed_ms,
            units_completed=report.units_completed,
        )
        return report

    def _stopped(self, results: List[Any], source: TriggerSource, started: float) -> LoopReport:
        report = LoopReport(
            units_completed=len(results),
            stopped_due_to=source,
            results=tuple(results),
            elapsed_ms=_elapsed_ms(started),
        )
        normalized_log_event(
            self._logger,
            "loop.stopped",
            self._ctx,
            phase="cancel",
            elapsed_ms=report.elapsed_ms,
            cancelled_by=source,
            units_completed=report.units_completed,
        )
        return report


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


__all__ = ["CooperativeLoop", "WorkUnit", "WorkUnits"]
