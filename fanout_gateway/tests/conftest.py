"""Pytest configuration for the gateway test suite.

Provides a seeded simulated transport plus both caller strategies sharing one
set of counters, and strips ``GATEWAY_*`` environment overrides so timing and
transport selection are deterministic.
"""

from __future__ import annotations

import random
from typing import Iterator

import pytest

from fanout_gateway.base.metrics import UpstreamCallCounters
from fanout_gateway.base.upstream import CancellableUpstreamCaller, NonCancellableUpstreamCaller
from fanout_gateway.mock import SimulatedPricingTransport

_GATEWAY_ENV = (
    "GATEWAY_PROVIDER_BASE_URL",
    "GATEWAY_TIMEOUT_HTTP_SECONDS",
    "GATEWAY_TIMEOUT_BUDGET_MS",
    "GATEWAY_DISCONNECT_POLL_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_gateway_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove environment overrides for the duration of a test."""

    for name in _GATEWAY_ENV:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture()
def transport() -> SimulatedPricingTransport:
    return SimulatedPricingTransport(rng=random.Random(1234), record=True)


@pytest.fixture()
def counters() -> UpstreamCallCounters:
    return UpstreamCallCounters()


@pytest.fixture()
def cancellable_caller(transport, counters) -> CancellableUpstreamCaller:
    return CancellableUpstreamCaller(transport, counters=counters)


@pytest.fixture()
def non_cancellable_caller(transport, counters) -> NonCancellableUpstreamCaller:
    return NonCancellableUpstreamCaller(transport, counters=counters)
