"""Report returned by ``CooperativeLoop.run``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..cancellation import TriggerSource


@dataclass(frozen=True)
class LoopReport:
    """Outcome of a cooperative loop.

    Attributes:
        units_completed: Units that ran to completion.
        stopped_due_to: Trigger source that stopped the loop, ``NONE`` when
            the unit sequence was exhausted.
        results: Values returned by the completed units, in order.
        elapsed_ms: Wall-clock duration of the loop.
    """

    units_completed: int
    stopped_due_to: TriggerSource = TriggerSource.NONE
    results: Tuple[Any, ...] = field(default_factory=tuple)
    elapsed_ms: int = 0

    @property
    def completed(self) -> bool:
        """True when every unit ran and no trigger stopped the loop."""
        return self.stopped_due_to is TriggerSource.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "units_completed": self.units_completed,
            "stopped_due_to": self.stopped_due_to.value,
            "results": list(self.results),
            "elapsed_ms": self.elapsed_ms,
        }


__all__ = ["LoopReport"]
