"""
Normalized upstream error codes (taxonomy).

Defines the `ErrorCode` enumeration used by upstream callers and the
aggregation layer. Values are lowercase snake_case and are considered a stable
public contract for logging and the metrics summary.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    INVALID_PAYLOAD = "invalid_payload"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
