"""Minimal dependency injection container for the gateway.

Goals:
- Centralize construction of the shared transport, callers, aggregator,
  orchestrator and counters.
- Let the service and tests swap the pricing transport (simulated or HTTP)
  without touching call sites.
- Keep zero web-framework dependencies per architecture rules.
"""

from __future__ import annotations

from typing import Any, Dict

from ..base.aggregation import FanOutAggregator
from ..base.metrics import UpstreamCallCounters
from ..base.upstream import (
    CancellableUpstreamCaller,
    HttpPricingTransport,
    NonCancellableUpstreamCaller,
    PricingTransport,
)
from ..config.env import resolve_provider_base_url
from ..mock import SimulatedPricingTransport
from ..orchestration import RequestOrchestrator


class GatewayContainer:
    """Dependency injection container for gateway services and singletons.

    Recognized ``config`` keys:
        transport: a ``PricingTransport`` instance overriding the default.
        provider_base_url: base URL of a real pricing provider; when absent
            (and ``GATEWAY_PROVIDER_BASE_URL`` is unset) the simulated provider
            is used.
        allow_partial: whether best-effort partial results are ``ok``.
    """

    def __init__(self, config: Dict[str, Any] | None = None) -> None:
        self._config = config or {}
        self._singletons: Dict[str, Any] = {}

    def _singleton(self, key: str, factory):
        if key not in self._singletons:
            self._singletons[key] = factory()
        return self._singletons[key]

    # ---- Shared singletons ----
    def counters(self) -> UpstreamCallCounters:
        return self._singleton("counters", UpstreamCallCounters)

    def transport(self) -> PricingTransport:
        """Return the pricing transport shared by both caller strategies."""

        def _build() -> PricingTransport:
            if self._config.get("transport") is not None:
                return self._config["transport"]
            base_url = self._config.get("provider_base_url") or resolve_provider_base_url()
            if base_url:
                return HttpPricingTransport(base_url)
            return SimulatedPricingTransport()

        return self._singleton("transport", _build)

    def pricing_backend(self) -> SimulatedPricingTransport:
        """Return the in-process provider served at ``/provider/pricing``."""
        return self._singleton("pricing_backend", SimulatedPricingTransport)

    # ---- Callers ----
    def cancellable_caller(self) -> CancellableUpstreamCaller:
        return self._singleton(
            "cancellable_caller",
            lambda: CancellableUpstreamCaller(self.transport(), counters=self.counters()),
        )

    def non_cancellable_caller(self) -> NonCancellableUpstreamCaller:
        return self._singleton(
            "non_cancellable_caller",
            lambda: NonCancellableUpstreamCaller(self.transport(), counters=self.counters()),
        )

    # ---- Core services ----
    def aggregator(self) -> FanOutAggregator:
        return self._singleton("aggregator", lambda: FanOutAggregator(self.cancellable_caller()))

    def orchestrator(self) -> RequestOrchestrator:
        return self._singleton(
            "orchestrator",
            lambda: RequestOrchestrator(
                self.cancellable_caller(),
                aggregator=self.aggregator(),
                allow_partial=bool(self._config.get("allow_partial", True)),
            ),
        )

    def clear(self) -> None:  # testing convenience
        """Drop every cached singleton; the next access rebuilds them."""
        self._singletons.clear()


def build_container(config: Dict[str, Any] | None = None) -> GatewayContainer:
    """Construct and return a new GatewayContainer instance."""
    return GatewayContainer(config=config)


__all__ = ["GatewayContainer", "build_container"]
