"""Shared async HTTP client pool for upstream transports.

Purpose:
    Provide a centralized pool of reusable ``httpx.AsyncClient`` instances to
    avoid per-call allocations and reduce connection overhead across
    upstream calls. Timeouts derive exclusively from
    :func:`get_timeout_config`.

External dependencies:
    - ``httpx`` for the underlying asynchronous HTTP client.

Timeout strategy:
    - The client's transport timeout is ``http_timeout_seconds`` from the
      timeout config. Request deadlines are NOT enforced here; they are
      cancellation-signal triggers owned by the orchestrator. Cancelling the
      awaiting task aborts the in-flight request at the transport level.

Lifecycle & cleanup:
    - ``httpx.AsyncClient`` connections belong to the event loop that opened
      them, so clients are cached per running loop, ``base_url`` and
      ``purpose``.
    - The service closes all clients on shutdown via :func:`aclose_all_clients`.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Dict, Optional, Tuple

import httpx

from ..timeouts import get_timeout_config

_ClientKey = Tuple[int, Optional[str], str]

_CLIENTS: Dict[_ClientKey, httpx.AsyncClient] = {}
_LOCK = threading.RLock()


def get_async_client(base_url: Optional[str], purpose: str) -> httpx.AsyncClient:
    """Return a pooled ``httpx.AsyncClient`` for the running loop.

    Parameters:
        base_url: Optional upstream base URL set on the client so callers can
            issue relative requests. ``None`` groups clients under a shared key.
        purpose: Short string discriminating separate pools (e.g. "pricing").

    Raises:
        RuntimeError: when called outside a running event loop.
    """
    loop = asyncio.get_running_loop()
    key = (id(loop), base_url, purpose)
    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None and not client.is_closed:
            return client
        timeout = httpx.Timeout(get_timeout_config().http_timeout_seconds)
        if base_url:
            client = httpx.AsyncClient(base_url=base_url, timeout=timeout)
        else:
            client = httpx.AsyncClient(timeout=timeout)
        _CLIENTS[key] = client
        return client


async def aclose_all_clients() -> None:
    """Close and forget every pooled client opened on the running loop."""
    loop_id = id(asyncio.get_running_loop())
    with _LOCK:
        owned = [k for k in _CLIENTS if k[0] == loop_id]
        clients = [_CLIENTS.pop(k) for k in owned]
    for client in clients:
        await client.aclose()


def pooled_client_count() -> int:
    with _LOCK:
        return len(_CLIENTS)


__all__ = ["get_async_client", "aclose_all_clients", "pooled_client_count"]
