"""Simulated in-process pricing provider for offline use and tests.

Purpose
-------
Implement the ``PricingTransport`` contract without network traffic: each
``fetch`` suspends for the target's ``latency_ms`` and then returns a random
quote, or raises an injected failure. The transport records which calls
started, completed, and were cancelled mid-sleep when created with
``record=True``, so tests can tell a call that was aborted at its I/O boundary
from one that ran to completion. Recording is off by default; the service
relies on ``UpstreamCallCounters`` instead.

External dependencies
---------------------
None besides the gateway's own DTOs.
"""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple

from ..base.upstream import PricingPayload, UpstreamTarget
from ..config.defaults import DEFAULT_CURRENCY, PRICE_MAX, PRICE_MIN


class SimulatedPricingTransport:
    """Pricing transport backed by ``asyncio.sleep``.

    Parameters
    ----------
    failures: Optional[Mapping[str, Exception]]
        Target name -> exception raised once the target's latency elapsed.
    rng: Optional[random.Random]
        Random source for prices; pass a seeded instance for determinism.
    price_range: Tuple[int, int]
        Inclusive price bounds.
    currency: str
        Currency reported in every quote.
    record: bool
        Keep the names of started, completed and cancelled calls.
    """

    def __init__(
        self,
        *,
        failures: Optional[Mapping[str, Exception]] = None,
        rng: Optional[random.Random] = None,
        price_range: Tuple[int, int] = (PRICE_MIN, PRICE_MAX),
        currency: str = DEFAULT_CURRENCY,
        record: bool = False,
    ) -> None:
        self._failures: Dict[str, Exception] = dict(failures or {})
        self._rng = rng or random.Random()
        self._price_range = price_range
        self._currency = currency
        self._record = record
        self.started: List[str] = []
        self.completed: List[str] = []
        self.cancelled: List[str] = []

    def fail(self, target_name: str, error: Exception) -> None:
        """Make every later call to ``target_name`` raise ``error``."""
        self._failures[target_name] = error

    def _note(self, calls: List[str], target_name: str) -> None:
        if self._record:
            calls.append(target_name)

    async def fetch(self, target: UpstreamTarget) -> PricingPayload:
        self._note(self.started, target.name)
        try:
            await asyncio.sleep(max(0, target.latency_ms) / 1000.0)
        except asyncio.CancelledError:
            self._note(self.cancelled, target.name)
            raise
        self._note(self.completed, target.name)
        error = self._failures.get(target.name)
        if error is not None:
            raise error
        low, high = self._price_range
        return PricingPayload(
            price=self._rng.randint(low, high),
            currency=self._currency,
            timestamp=datetime.now(timezone.utc),
        )


__all__ = ["SimulatedPricingTransport"]
