"""Upstream caller that propagates the cancellation signal into I/O."""

from __future__ import annotations

from ..cancellation import CancellationSignal, run_cancellable
from .caller_base import BaseUpstreamCaller
from .pricing_payload import PricingPayload
from .target import UpstreamTarget


class CancellableUpstreamCaller(BaseUpstreamCaller):
    """Awaits the transport through ``run_cancellable``.

    Nothing is sent when the signal has already triggered. While suspended,
    a trigger cancels the transport task and the call ends as
    ``cancelled(source)`` without waiting for the provider's latency.
    """

    cancellable = True

    async def _perform(self, target: UpstreamTarget, signal: CancellationSignal) -> PricingPayload:
        return await run_cancellable(self._transport.fetch(target), signal)


__all__ = ["CancellableUpstreamCaller"]
