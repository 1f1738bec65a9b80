"""Upstream boundary protocols (transport and caller)."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..cancellation import CancellationSignal
from ..logging import LogContext
from .call_outcome import CallOutcome
from .pricing_payload import PricingPayload
from .target import UpstreamTarget


@runtime_checkable
class PricingTransport(Protocol):
    """Raw I/O to one pricing provider.

    Transports know nothing about cancellation signals. They must suspend at
    their I/O boundary and must let ``asyncio.CancelledError`` propagate so
    that a cancellable caller can abort them.
    """

    async def fetch(self, target: UpstreamTarget) -> PricingPayload:  # pragma: no cover - interface
        ...


@runtime_checkable
class UpstreamCaller(Protocol):
    """Issues one call per ``invoke`` and reports its outcome.

    ``invoke`` never raises for upstream failures or cooperative
    cancellation; both are encoded in the returned ``CallOutcome``.
    """

    cancellable: bool

    async def invoke(
        self,
        target: UpstreamTarget,
        signal: CancellationSignal,
        *,
        ctx: Optional[LogContext] = None,
    ) -> CallOutcome:  # pragma: no cover - interface
        ...


__all__ = ["PricingTransport", "UpstreamCaller"]
