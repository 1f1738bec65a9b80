"""Aggregated result of a fan-out."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from ..cancellation import TriggerSource
from ..upstream import CallOutcome, OutcomeStatus, PricingPayload
from .policy import AggregationPolicy


class AggregateStatus(str, Enum):
    """Overall status derived from per-call outcomes and the policy."""

    SUCCEEDED = "succeeded"
    # Best-effort only: at least one success and at least one non-success.
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AggregatedResult:
    """Per-call outcomes in target issuance order plus derived status.

    ``cause`` is the outcome that determined a non-success status: the
    short-circuiting outcome under fail-fast, or the first outcome (in
    issuance order) matching the status under best-effort.
    """

    policy: AggregationPolicy
    outcomes: Tuple[CallOutcome, ...]
    status: AggregateStatus
    cause: Optional[CallOutcome] = None
    elapsed_ms: int = 0

    @classmethod
    def build(
        cls,
        policy: AggregationPolicy,
        outcomes: Sequence[CallOutcome],
        *,
        cause: Optional[CallOutcome] = None,
        elapsed_ms: int = 0,
    ) -> "AggregatedResult":
        outcomes = tuple(outcomes)
        if all(o.ok for o in outcomes):
            return cls(policy, outcomes, AggregateStatus.SUCCEEDED, None, elapsed_ms)
        if policy is AggregationPolicy.FAIL_FAST and cause is not None:
            status = AggregateStatus.CANCELLED if cause.status is OutcomeStatus.CANCELLED else AggregateStatus.FAILED
            return cls(policy, outcomes, status, cause, elapsed_ms)
        succeeded = sum(1 for o in outcomes if o.ok)
        failed = sum(1 for o in outcomes if o.status is OutcomeStatus.FAILED)
        if succeeded:
            status = AggregateStatus.PARTIAL
            cause = next(o for o in outcomes if not o.ok)
        elif failed:
            status = AggregateStatus.FAILED
            cause = next(o for o in outcomes if o.status is OutcomeStatus.FAILED)
        else:
            status = AggregateStatus.CANCELLED
            cause = next(o for o in outcomes if o.status is OutcomeStatus.CANCELLED)
        return cls(policy, outcomes, status, cause, elapsed_ms)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return self._count(OutcomeStatus.CANCELLED)

    @property
    def not_awaited(self) -> int:
        return self._count(OutcomeStatus.NOT_AWAITED)

    @property
    def cancelled_by(self) -> Optional[TriggerSource]:
        return self.cause.cancelled_by if self.cause is not None else None

    @property
    def payloads(self) -> Tuple[PricingPayload, ...]:
        return tuple(o.payload for o in self.outcomes if o.payload is not None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy.value,
            "status": self.status.value,
            "counts": {
                "succeeded": self.succeeded,
                "failed": self.failed,
                "cancelled": self.cancelled,
                "not_awaited": self.not_awaited,
            },
            "cause": self.cause.to_dict() if self.cause is not None else None,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "elapsed_ms": self.elapsed_ms,
        }


__all__ = ["AggregateStatus", "AggregatedResult"]
