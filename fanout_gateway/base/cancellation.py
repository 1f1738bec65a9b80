"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the gateway's cancellation constructs via the canonical
``fanout_gateway.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationSignal`` is write-once: the first trigger wins and records a
  ``TriggerSource`` (caller abort, timeout, or aggregation abort).
- Linked signals are push-based. Parents notify children; nobody polls.
- ``CancelledError`` is raised by operations that observe a triggered signal.
- The module-level functions below are thin aliases kept for call sites that
  read better in functional form (``link(a, b)``, ``triggering_source(s)``).
"""

from __future__ import annotations

from .cancellation_parts.cancellable import cancellable_sleep, run_cancellable
from .cancellation_parts.cancellation_signal import CancellationSignal
from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.trigger_source import TriggerSource


def create() -> CancellationSignal:
    """Return a new, untriggered signal."""
    return CancellationSignal()


def link(*parents: CancellationSignal) -> CancellationSignal:
    """Return a signal triggered as soon as any of ``parents`` triggers."""
    return CancellationSignal.linked(*parents)


def trigger_by_timeout(signal: CancellationSignal, seconds: float) -> CancellationSignal:
    """Arm a timeout on ``signal`` (see ``CancellationSignal.cancel_after``)."""
    signal.cancel_after(seconds)
    return signal


def is_triggered(signal: CancellationSignal) -> bool:
    return signal.triggered


def triggering_source(signal: CancellationSignal) -> TriggerSource:
    return signal.source


__all__ = [
    "CancellationSignal",
    "CancelledError",
    "TriggerSource",
    "create",
    "link",
    "trigger_by_timeout",
    "is_triggered",
    "triggering_source",
    "run_cancellable",
    "cancellable_sleep",
]
