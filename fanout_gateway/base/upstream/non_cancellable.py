"""Upstream caller that does not pass the signal to its I/O."""

from __future__ import annotations

from ..cancellation import CancellationSignal
from .caller_base import BaseUpstreamCaller
from .pricing_payload import PricingPayload
from .target import UpstreamTarget


class NonCancellableUpstreamCaller(BaseUpstreamCaller):
    """Awaits the transport directly, ignoring ``signal``.

    The call always runs for the provider's full latency and ends as
    ``succeeded`` or ``failed``, even when the signal triggered meanwhile.
    Kept as a first-class strategy so the difference is observable in tests
    and in the ``/offers/bad`` demo endpoint.
    """

    cancellable = False

    async def _perform(self, target: UpstreamTarget, signal: CancellationSignal) -> PricingPayload:
        return await self._transport.fetch(target)


__all__ = ["NonCancellableUpstreamCaller"]
