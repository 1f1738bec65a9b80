"""Inbound request boundary seen by the orchestrator.

The HTTP layer owns the real request; the orchestrator only needs an abort
notification (a ``CancellationSignal`` the HTTP layer triggers with
``TriggerSource.CALLER`` when the client goes away) and the query parameters.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..base.cancellation import CancellationSignal
from ..base.errors import GatewayLogicError


def _new_request_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class InboundRequest:
    """Abort notification plus query parameters of one inbound request."""

    abort_signal: CancellationSignal = field(default_factory=CancellationSignal)
    params: Mapping[str, str] = field(default_factory=dict)
    request_id: str = field(default_factory=_new_request_id)

    def int_param(
        self,
        name: str,
        default: Optional[int] = None,
        *,
        minimum: int = 0,
        maximum: Optional[int] = None,
    ) -> Optional[int]:
        """Read an integer query parameter.

        Raises:
            GatewayLogicError: the value is not an integer or out of range.
        """
        raw = self.params.get(name)
        if raw is None or str(raw).strip() == "":
            return default
        try:
            value = int(raw)
        except (TypeError, ValueError) as exc:
            raise GatewayLogicError(f"query parameter {name!r} must be an integer, got {raw!r}") from exc
        if value < minimum or (maximum is not None and value > maximum):
            bound = f"[{minimum}, {maximum}]" if maximum is not None else f">= {minimum}"
            raise GatewayLogicError(f"query parameter {name!r} must be {bound}, got {value}")
        return value

    def str_param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        raw = self.params.get(name)
        return default if raw is None or str(raw).strip() == "" else str(raw)


__all__ = ["InboundRequest"]
