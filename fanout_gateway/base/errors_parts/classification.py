"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements HTTP status extraction, status-to-code mapping, transport exception
mapping for ``httpx``, and message-based heuristics as a last resort.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Tuple

import httpx
from pydantic import ValidationError

from .error_code import ErrorCode
from .upstream_error import UpstreamError


def _valid_status(value: object) -> Optional[int]:
    return value if isinstance(value, int) and 100 <= value < 600 else None


def _extract_status(exc: BaseException) -> Optional[int]:
    """HTTP status carried by ``exc`` (``status_code``, ``status`` or ``response.status_code``)."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    status = _valid_status(getattr(exc, "status_code", None)) or _valid_status(getattr(exc, "status", None))
    if status is None:
        status = _valid_status(getattr(getattr(exc, "response", None), "status_code", None))
    return status


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    # Provider gave up because its own caller went away.
    499: ErrorCode.CANCELLED,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

RETRYABLE_CODES = frozenset(
    {ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE}
)


# Checked in order against the lowercased message of status-less exceptions.
_MESSAGE_HINTS: Tuple[Tuple[ErrorCode, Tuple[str, ...]], ...] = (
    (ErrorCode.RATE_LIMIT, ("rate limit", "too many requests")),
    (ErrorCode.TIMEOUT, ("timeout", "timed out", "deadline")),
    (ErrorCode.AUTH, ("unauthorized", "forbidden")),
    (ErrorCode.NOT_FOUND, ("not found", "unknown provider")),
    (ErrorCode.UNAVAILABLE, ("unavailable", "connection refused", "connection reset")),
    (ErrorCode.VALIDATION, ("invalid", "malformed")),
    (ErrorCode.SERVER_ERROR, ("server error", "internal error")),
)


def _code_from_message(message: str) -> Optional[ErrorCode]:
    text = message.lower()
    for code, hints in _MESSAGE_HINTS:
        if any(hint in text for hint in hints):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. UpstreamError passthrough.
        2. Timeout exceptions (builtin, asyncio, httpx).
        3. Payload validation errors.
        4. Connection-level httpx errors.
        5. HTTP status mapping.
        6. Substring heuristics.
        7. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, UpstreamError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, ValidationError):
        return ErrorCode.INVALID_PAYLOAD
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.UNAVAILABLE
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status is not None and status >= 500:
        return ErrorCode.SERVER_ERROR
    code = _code_from_message(str(exc))
    return code if code is not None else ErrorCode.UNKNOWN


def to_upstream_error(exc: BaseException, target: str) -> UpstreamError:
    """Wrap ``exc`` into an :class:`UpstreamError` for ``target``."""
    if isinstance(exc, UpstreamError):
        return exc
    code = classify_exception(exc)
    return UpstreamError(
        code=code,
        message=str(exc) or type(exc).__name__,
        target=target,
        status=_extract_status(exc),
        retryable=code in RETRYABLE_CODES,
        raw=exc if isinstance(exc, Exception) else None,
    )


__all__ = [
    "classify_exception",
    "to_upstream_error",
    "RETRYABLE_CODES",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
