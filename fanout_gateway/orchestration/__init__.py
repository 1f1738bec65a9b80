"""Request orchestration: inbound request -> signal -> workload -> response."""

from .inbound_request import InboundRequest
from .request_orchestrator import RequestOrchestrator, Workload, response_body
from .response import GatewayResponse, ResponseClassification
from .workloads import FanOut, IterativeWork, SingleCall

__all__ = [
    "InboundRequest",
    "RequestOrchestrator",
    "Workload",
    "response_body",
    "GatewayResponse",
    "ResponseClassification",
    "SingleCall",
    "IterativeWork",
    "FanOut",
]
