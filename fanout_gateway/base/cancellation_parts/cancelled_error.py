"""Cancellation error type.

Defines the public ``CancelledError`` raised by operations that observe a
triggered ``CancellationSignal``. It is a plain ``RuntimeError`` subclass and
is unrelated to ``asyncio.CancelledError``: the latter means the task itself
was cancelled, this one means the work noticed a cooperative signal.
"""

from __future__ import annotations

from .trigger_source import TriggerSource


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Carries the ``TriggerSource`` that fired so callers can tell a caller
    abort from a timeout without inspecting the signal again.
    """

    def __init__(self, source: TriggerSource, reason: str | None = None) -> None:
        self.source = source
        self.reason = reason
        super().__init__(reason or f"operation cancelled ({source.value})")


__all__ = ["CancelledError"]
