"""Translate HTTP client disconnects into caller-abort triggers.

Starlette exposes no push notification for a client going away while a
handler is running, so a small watcher task polls ``Request.is_disconnected``
every ``disconnect_poll_seconds`` and triggers the request's abort signal with
``TriggerSource.CALLER``. The watcher is cancelled as soon as the handler
finishes.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Optional

from fastapi import Request

from fanout_gateway.base.cancellation import CancellationSignal, TriggerSource
from fanout_gateway.base.timeouts import get_timeout_config


async def watch_disconnect(request: Request, signal: CancellationSignal, poll_seconds: float) -> None:
    """Trigger ``signal`` with ``CALLER`` once ``request`` reports a disconnect."""
    while not signal.triggered:
        if await request.is_disconnected():
            signal.trigger(TriggerSource.CALLER, "client disconnected")
            return
        await asyncio.sleep(poll_seconds)


@asynccontextmanager
async def abort_signal_for(
    request: Request,
    poll_seconds: Optional[float] = None,
) -> AsyncIterator[CancellationSignal]:
    """Yield an abort signal kept in sync with the client connection."""
    if poll_seconds is None:
        poll_seconds = get_timeout_config().disconnect_poll_seconds
    signal = CancellationSignal()
    watcher = asyncio.create_task(watch_disconnect(request, signal, poll_seconds), name="disconnect-watcher")
    try:
        yield signal
    finally:
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await watcher
        signal.dispose()


__all__ = ["watch_disconnect", "abort_signal_for"]
