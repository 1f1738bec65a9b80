"""Structured logging context object for the gateway.

This module defines :class:`LogContext`, a dataclass carrying the common
fields of gateway logging events (request id, operation, upstream target and
extra metadata). ``to_dict`` merges ``extra`` and prunes ``None`` values.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field, replace
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for gateway logging events."""

    request_id: Optional[str] = None
    operation: Optional[str] = None
    target: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def for_target(self, target: str) -> "LogContext":
        """Return a copy scoped to one upstream target."""
        return replace(self, target=target, extra=dict(self.extra))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
