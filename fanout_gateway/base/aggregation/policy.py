"""Aggregation policy enumeration."""

from __future__ import annotations

from enum import Enum


class AggregationPolicy(str, Enum):
    """How a fan-out reacts to individual call failures.

    ``FAIL_FAST``: the first failed or cancelled call ends the aggregation.
    ``BEST_EFFORT``: every call is awaited; failures are recorded per target.
    """

    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"

    @classmethod
    def parse(cls, value: "str | AggregationPolicy") -> "AggregationPolicy":
        """Parse a policy from its value, accepting ``_`` for ``-``."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"unknown aggregation policy: {value!r}")


__all__ = ["AggregationPolicy"]
