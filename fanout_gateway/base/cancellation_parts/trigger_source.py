"""Trigger source enumeration for cancellation signals.

Values are lowercase strings and form a stable contract for logging and the
response classification performed by the orchestrator.
"""

from __future__ import annotations

from enum import Enum


class TriggerSource(str, Enum):
    """Which source caused a ``CancellationSignal`` to trigger."""

    NONE = "none"
    CALLER = "caller"
    TIMEOUT = "timeout"
    # Set by a fail-fast aggregation on the calls it stops waiting for.
    ABORTED = "aborted"


__all__ = ["TriggerSource"]
