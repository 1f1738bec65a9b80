"""Unified gateway error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``fanout_gateway.base.errors_parts`` to keep a stable import path.

Taxonomy
--------
- ``CancelledError`` (see ``base.cancellation``): work observed a triggered
  signal. Carries the trigger source (caller abort or timeout).
- ``UpstreamError``: a provider call failed; carries a normalized
  ``ErrorCode``.
- ``GatewayLogicError``: the request could not be run at all.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.upstream_error import UpstreamError
from .errors_parts.gateway_logic_error import GatewayLogicError
from .errors_parts.classification import classify_exception, to_upstream_error

__all__ = [
    "ErrorCode",
    "UpstreamError",
    "GatewayLogicError",
    "classify_exception",
    "to_upstream_error",
]
