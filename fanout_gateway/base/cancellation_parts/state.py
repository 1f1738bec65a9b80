"""Internal state holder for cancellation signals.

Dataclass used by ``CancellationSignal`` to track the single trigger
transition (source and optional reason).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .trigger_source import TriggerSource


@dataclass
class State:
    """Internal state for cooperative cancellation signals."""

    source: TriggerSource = TriggerSource.NONE
    reason: Optional[str] = None

    @property
    def triggered(self) -> bool:
        return self.source is not TriggerSource.NONE


__all__ = ["State"]
