"""Response classification produced by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from ..base.cancellation import TriggerSource
from ..config.defaults import (
    STATUS_BAD_REQUEST,
    STATUS_CLIENT_CLOSED_REQUEST,
    STATUS_DEADLINE_EXCEEDED,
    STATUS_UPSTREAM_ERROR,
)


class ResponseClassification(str, Enum):
    """Outward classification of a finished request."""

    OK = "ok"
    CLIENT_CLOSED_REQUEST = "client_closed_request"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    UPSTREAM_ERROR = "upstream_error"
    BAD_REQUEST = "bad_request"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @classmethod
    def for_cancellation(cls, source: TriggerSource) -> "ResponseClassification":
        """Map a trigger source to its classification.

        ``ABORTED`` only occurs when a sibling call failed first, so it is an
        upstream error rather than a cancellation.
        """
        if source is TriggerSource.CALLER:
            return cls.CLIENT_CLOSED_REQUEST
        if source is TriggerSource.TIMEOUT:
            return cls.DEADLINE_EXCEEDED
        return cls.UPSTREAM_ERROR


_STATUS_CODES: Dict[ResponseClassification, int] = {
    ResponseClassification.OK: 200,
    ResponseClassification.CLIENT_CLOSED_REQUEST: STATUS_CLIENT_CLOSED_REQUEST,
    ResponseClassification.DEADLINE_EXCEEDED: STATUS_DEADLINE_EXCEEDED,
    ResponseClassification.UPSTREAM_ERROR: STATUS_UPSTREAM_ERROR,
    ResponseClassification.BAD_REQUEST: STATUS_BAD_REQUEST,
}


@dataclass(frozen=True)
class GatewayResponse:
    """Classification, HTTP-equivalent status and JSON body of a request."""

    classification: ResponseClassification
    body: Dict[str, Any] = field(default_factory=dict)
    elapsed_ms: int = 0
    request_id: str = ""

    @property
    def status_code(self) -> int:
        return self.classification.status_code

    @property
    def ok(self) -> bool:
        return self.classification is ResponseClassification.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.body,
            "classification": self.classification.value,
            "request_id": self.request_id,
            "elapsed_ms": self.elapsed_ms,
        }


__all__ = ["ResponseClassification", "GatewayResponse"]
