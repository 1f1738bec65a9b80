"""
Pydantic DTO for provider pricing payloads.

Purpose
-------
Validate the JSON body returned by a pricing provider before it enters an
outcome. A payload that fails validation is an upstream failure classified as
``ErrorCode.INVALID_PAYLOAD``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class PricingPayload(BaseModel):
    """Price quote returned by one provider.

    Attributes:
        price: Integer price in minor-less currency units (the demo providers
            quote whole units).
        currency: ISO-like currency code.
        timestamp: When the provider produced the quote.
    """

    model_config = ConfigDict(frozen=True)

    price: int = Field(ge=0)
    currency: str = Field(min_length=1)
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


__all__ = ["PricingPayload"]
