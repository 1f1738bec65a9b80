"""Helpers binding awaitables to a ``CancellationSignal``.

``run_cancellable`` is what "passing the signal into the I/O call" means in
asyncio terms: the awaitable runs as a task raced against ``signal.wait()``,
and the task is cancelled as soon as the signal triggers.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from .cancellation_signal import CancellationSignal
from .cancelled_error import CancelledError

T = TypeVar("T")


async def run_cancellable(awaitable: Awaitable[T], signal: CancellationSignal) -> T:
    """Await ``awaitable`` unless ``signal`` triggers first.

    Raises:
        CancelledError: the signal triggered before the awaitable finished.
            The underlying task is cancelled and awaited before raising, so
            no work outlives the call.
    """
    if signal.triggered:
        # Never start work on an already-triggered signal.
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        signal.raise_if_triggered()
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise
    if task.done():
        waiter.cancel()
        return task.result()
    task.cancel()
    # Drain the cancelled task; its result or error is discarded by contract.
    await asyncio.gather(task, return_exceptions=True)
    raise CancelledError(signal.source, signal.reason)


async def cancellable_sleep(seconds: float, signal: CancellationSignal) -> None:
    """Sleep for ``seconds`` or until ``signal`` triggers (raising)."""
    await run_cancellable(asyncio.sleep(seconds), signal)


__all__ = ["run_cancellable", "cancellable_sleep"]
