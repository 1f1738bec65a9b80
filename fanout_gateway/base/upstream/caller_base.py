"""Shared implementation of upstream callers.

``BaseUpstreamCaller.invoke`` owns everything both strategies have in common:
timing, counters, structured events, and mapping of the three ways a call can
end (payload, ``CancelledError``, any other exception) onto a
``CallOutcome``. Subclasses only decide how the transport is awaited.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from ..cancellation import CancellationSignal, CancelledError, TriggerSource
from ..errors import to_upstream_error
from ..logging import LogContext, get_logger, normalized_log_event
from ..metrics import UpstreamCallCounters
from .call_outcome import CallOutcome
from .interfaces import PricingTransport
from .pricing_payload import PricingPayload
from .target import UpstreamTarget


class BaseUpstreamCaller:
    """Template for upstream callers; subclasses implement ``_perform``."""

    cancellable: bool = False

    def __init__(
        self,
        transport: PricingTransport,
        *,
        counters: Optional[UpstreamCallCounters] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._transport = transport
        self._counters = counters or UpstreamCallCounters()
        self._ctx = ctx or LogContext()
        self._logger = get_logger("gateway.upstream")

    @property
    def counters(self) -> UpstreamCallCounters:
        return self._counters

    @property
    def transport(self) -> PricingTransport:
        return self._transport

    async def _perform(self, target: UpstreamTarget, signal: CancellationSignal) -> PricingPayload:
        raise NotImplementedError

    async def invoke(
        self,
        target: UpstreamTarget,
        signal: CancellationSignal,
        *,
        ctx: Optional[LogContext] = None,
    ) -> CallOutcome:
        """Issue one call to ``target`` and return its terminal outcome.

        Only ``asyncio.CancelledError`` (the awaiting task itself was
        cancelled) escapes; it is counted as an ``aborted`` cancellation first.
        """
        log_ctx = (ctx or self._ctx).for_target(target.name)
        started = time.monotonic()
        self._counters.record_start()
        normalized_log_event(
            self._logger,
            "call.started",
            log_ctx,
            phase="start",
            elapsed_ms=0,
            latency_ms=target.latency_ms,
            cancellable=self.cancellable,
        )
        try:
            payload = await self._perform(target, signal)
        except CancelledError as exc:
            return self._cancelled(target, exc.source, started, log_ctx)
        except asyncio.CancelledError:
            self._counters.record_cancelled(TriggerSource.ABORTED.value)
            raise
        except Exception as exc:  # noqa: BLE001 - every failure becomes an outcome
            error = to_upstream_error(exc, target.name)
            elapsed = _elapsed_ms(started)
            self._counters.record_failure(error.code.value, latency_ms=elapsed)
            normalized_log_event(
                self._logger,
                "call.failed",
                log_ctx,
                phase="finalize",
                elapsed_ms=elapsed,
                error_code=error.code.value,
                message=error.message,
            )
            return CallOutcome.failed(target, error, elapsed)
        elapsed = _elapsed_ms(started)
        self._counters.record_success(elapsed)
        normalized_log_event(
            self._logger,
            "call.completed",
            log_ctx,
            phase="finalize",
            elapsed_ms=elapsed,
            # A non-cancellable call finishing after a trigger is the leak the
            # cancellable strategy exists to prevent.
            signal_ignored=True if signal.triggered else None,
        )
        return CallOutcome.succeeded(target, payload, elapsed)

    def _cancelled(
        self,
        target: UpstreamTarget,
        source: TriggerSource,
        started: float,
        log_ctx: LogContext,
    ) -> CallOutcome:
        elapsed = _elapsed_ms(started)
        self._counters.record_cancelled(source.value)
        normalized_log_event(
            self._logger,
            "call.cancelled",
            log_ctx,
            phase="cancel",
            elapsed_ms=elapsed,
            cancelled_by=source,
        )
        return CallOutcome.cancelled(target, source, elapsed)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


__all__ = ["BaseUpstreamCaller"]
