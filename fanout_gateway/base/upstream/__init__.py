"""Upstream calls: targets, payloads, outcomes, transports and callers.

Two caller strategies share one interface so that code and tests can be
parametrized over them:

- ``CancellableUpstreamCaller`` passes the request's signal into the I/O.
- ``NonCancellableUpstreamCaller`` does not, and always runs to completion.
"""

from .call_outcome import CallOutcome, OutcomeStatus
from .cancellable import CancellableUpstreamCaller
from .caller_base import BaseUpstreamCaller
from .http_transport import HttpPricingTransport
from .interfaces import PricingTransport, UpstreamCaller
from .non_cancellable import NonCancellableUpstreamCaller
from .pricing_payload import PricingPayload
from .target import UpstreamTarget

__all__ = [
    "UpstreamTarget",
    "PricingPayload",
    "OutcomeStatus",
    "CallOutcome",
    "PricingTransport",
    "UpstreamCaller",
    "BaseUpstreamCaller",
    "CancellableUpstreamCaller",
    "NonCancellableUpstreamCaller",
    "HttpPricingTransport",
]
