"""fanout_gateway package

Cooperative cancellation and parallel-aggregation core for an API gateway.

Purpose:
    Fan a request out to several upstream pricing providers, propagate caller
    aborts and timeout budgets cooperatively through every call and loop
    iteration, and aggregate results with partial-failure tolerance.

Public API (re-exported):
    - Version: ``__version__``
    - Core: :class:`CancellationSignal`, :class:`CooperativeLoop`,
      :class:`FanOutAggregator`, :class:`RequestOrchestrator`
    - Errors: :class:`UpstreamError`, :class:`ErrorCode`,
      :class:`GatewayLogicError`

Notes:
    - The FastAPI demo service lives in ``fanout_gateway.service`` and is not
      imported here so the core stays usable without the web stack.
"""

from .base import (
    AggregationPolicy,
    CancellationSignal,
    CancelledError,
    CooperativeLoop,
    ErrorCode,
    FanOutAggregator,
    GatewayLogicError,
    TriggerSource,
    UpstreamError,
    UpstreamTarget,
)
from .orchestration import (
    FanOut,
    GatewayResponse,
    InboundRequest,
    IterativeWork,
    RequestOrchestrator,
    ResponseClassification,
    SingleCall,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CancellationSignal",
    "CancelledError",
    "TriggerSource",
    "CooperativeLoop",
    "UpstreamTarget",
    "AggregationPolicy",
    "FanOutAggregator",
    "RequestOrchestrator",
    "InboundRequest",
    "GatewayResponse",
    "ResponseClassification",
    "SingleCall",
    "IterativeWork",
    "FanOut",
    "UpstreamError",
    "ErrorCode",
    "GatewayLogicError",
]
