"""Outcome of a single upstream call."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..cancellation import TriggerSource
from ..errors import UpstreamError
from .pricing_payload import PricingPayload
from .target import UpstreamTarget


class OutcomeStatus(str, Enum):
    """Lifecycle state of an upstream call as observed by its issuer."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    # Fail-fast aggregation stopped waiting before the call finished.
    NOT_AWAITED = "not_awaited"


@dataclass(frozen=True)
class CallOutcome:
    """Terminal (or not-awaited) state of one upstream call.

    Exactly one of ``payload`` (succeeded), ``error`` (failed) or
    ``cancelled_by`` (cancelled) is set for terminal outcomes; none is set for
    ``pending`` and ``not_awaited``.
    """

    target: UpstreamTarget
    status: OutcomeStatus
    payload: Optional[PricingPayload] = None
    error: Optional[UpstreamError] = None
    cancelled_by: Optional[TriggerSource] = None
    elapsed_ms: Optional[int] = None

    @classmethod
    def succeeded(cls, target: UpstreamTarget, payload: PricingPayload, elapsed_ms: int) -> "CallOutcome":
        return cls(target, OutcomeStatus.SUCCEEDED, payload=payload, elapsed_ms=elapsed_ms)

    @classmethod
    def failed(cls, target: UpstreamTarget, error: UpstreamError, elapsed_ms: int) -> "CallOutcome":
        return cls(target, OutcomeStatus.FAILED, error=error, elapsed_ms=elapsed_ms)

    @classmethod
    def cancelled(cls, target: UpstreamTarget, source: TriggerSource, elapsed_ms: int) -> "CallOutcome":
        return cls(target, OutcomeStatus.CANCELLED, cancelled_by=source, elapsed_ms=elapsed_ms)

    @classmethod
    def not_awaited(cls, target: UpstreamTarget) -> "CallOutcome":
        return cls(target, OutcomeStatus.NOT_AWAITED)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @property
    def terminal(self) -> bool:
        return self.status in (OutcomeStatus.SUCCEEDED, OutcomeStatus.FAILED, OutcomeStatus.CANCELLED)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "target": self.target.name,
            "status": self.status.value,
            "elapsed_ms": self.elapsed_ms,
        }
        if self.payload is not None:
            data["payload"] = self.payload.to_dict()
        if self.error is not None:
            data["error"] = self.error.to_dict()
        if self.cancelled_by is not None:
            data["cancelled_by"] = self.cancelled_by.value
        return data


__all__ = ["OutcomeStatus", "CallOutcome"]
