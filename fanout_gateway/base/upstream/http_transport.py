"""HTTP pricing transport backed by the shared ``httpx.AsyncClient`` pool.

Issues ``GET {address}?delayMs={latency_ms}`` against a pricing provider and
validates the JSON body into a ``PricingPayload``. Non-2xx responses raise
``httpx.HTTPStatusError`` which the caller classifies by status code.
Cancelling the awaiting task aborts the request at the transport level.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ..http import get_async_client
from .pricing_payload import PricingPayload
from .target import UpstreamTarget

DEFAULT_PRICING_PATH = "/provider/pricing"


class HttpPricingTransport:
    """Fetch pricing quotes over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        path: str = DEFAULT_PRICING_PATH,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url
        self._path = path
        self._client = client

    def _client_for_call(self) -> httpx.AsyncClient:
        return self._client or get_async_client(self._base_url, "pricing")

    async def fetch(self, target: UpstreamTarget) -> PricingPayload:
        url = target.address or self._path
        response = await self._client_for_call().get(url, params={"delayMs": target.latency_ms})
        response.raise_for_status()
        return PricingPayload.model_validate(response.json())


__all__ = ["HttpPricingTransport", "DEFAULT_PRICING_PATH"]
