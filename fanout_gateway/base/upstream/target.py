"""Upstream target value object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UpstreamTarget:
    """One provider to call.

    Attributes:
        name: Stable identifier used in logs, outcomes and responses.
        latency_ms: Latency the provider is asked to simulate (``delayMs``).
        address: Optional absolute URL or path overriding the transport's
            default endpoint.
    """

    name: str
    latency_ms: int = 0
    address: Optional[str] = None


__all__ = ["UpstreamTarget"]
