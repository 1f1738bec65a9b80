"""
Gateway Base Package

Exports the framework-agnostic request core: cancellation signals, the
cooperative loop, upstream callers and transports, fan-out aggregation, the
error taxonomy and the timeout configuration.

Conforms to the layering enforced by the architecture tests:
- Nothing under ``base`` imports the FastAPI service layer.
- Cancellation is cooperative; timeouts are signal triggers, never preemption.
"""

from .aggregation import AggregateStatus, AggregatedResult, AggregationPolicy, FanOutAggregator
from .cancellation import CancellationSignal, CancelledError, TriggerSource, run_cancellable
from .errors import ErrorCode, GatewayLogicError, UpstreamError, classify_exception
from .loop import CooperativeLoop, LoopReport
from .timeouts import TimeoutConfig, get_timeout_config
from .upstream import (
    CallOutcome,
    CancellableUpstreamCaller,
    HttpPricingTransport,
    NonCancellableUpstreamCaller,
    OutcomeStatus,
    PricingPayload,
    PricingTransport,
    UpstreamCaller,
    UpstreamTarget,
)

__all__ = [
    # Cancellation
    "CancellationSignal",
    "CancelledError",
    "TriggerSource",
    "run_cancellable",
    # Loop
    "CooperativeLoop",
    "LoopReport",
    # Upstream
    "UpstreamTarget",
    "PricingPayload",
    "PricingTransport",
    "UpstreamCaller",
    "CallOutcome",
    "OutcomeStatus",
    "CancellableUpstreamCaller",
    "NonCancellableUpstreamCaller",
    "HttpPricingTransport",
    # Aggregation
    "AggregationPolicy",
    "AggregateStatus",
    "AggregatedResult",
    "FanOutAggregator",
    # Errors
    "ErrorCode",
    "UpstreamError",
    "GatewayLogicError",
    "classify_exception",
    # Timeouts
    "TimeoutConfig",
    "get_timeout_config",
]
