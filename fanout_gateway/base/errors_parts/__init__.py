"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `fanout_gateway.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .upstream_error import UpstreamError
from .gateway_logic_error import GatewayLogicError
from .classification import classify_exception, to_upstream_error

__all__ = [
    "ErrorCode",
    "UpstreamError",
    "GatewayLogicError",
    "classify_exception",
    "to_upstream_error",
]
