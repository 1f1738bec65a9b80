"""
Structured upstream error exception type.

Wraps transport-specific exceptions with a normalized `ErrorCode` so failed
call outcomes can be logged, counted and classified consistently.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class UpstreamError(Exception):
    """Represents a failed upstream call with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        target: Name of the upstream target where the error originated.
        status: HTTP status reported by the upstream, when there was one.
        retryable: Hint for callers deciding whether to try again.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    target: str
    status: Optional[int] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.target} {self.code.value}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "target": self.target,
            "status": self.status,
            "retryable": self.retryable,
        }


__all__ = ["UpstreamError"]
