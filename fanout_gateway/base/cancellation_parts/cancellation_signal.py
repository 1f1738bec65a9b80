"""Composable cancellation signal implementation.

Exposes the ``CancellationSignal`` class used across the gateway to stop
upstream calls and loop iterations cooperatively. A signal transitions exactly
once from untriggered to triggered, recording which ``TriggerSource`` fired.
Linked signals follow any number of parents; parents push the trigger to their
children, so nobody has to poll.
"""

from __future__ import annotations

import asyncio
from threading import Lock
from typing import Callable, Iterable, List

from .cancelled_error import CancelledError
from .state import State
from .trigger_source import TriggerSource

TriggerCallback = Callable[[TriggerSource], None]


def _set_if_pending(fut: "asyncio.Future[TriggerSource]", source: TriggerSource) -> None:
    if not fut.done():
        fut.set_result(source)


def _resolve(fut: "asyncio.Future[TriggerSource]", source: TriggerSource) -> None:
    """Complete a waiter future from whichever thread triggered the signal."""
    loop = fut.get_loop()
    if loop.is_closed():
        return
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        _set_if_pending(fut, source)
    else:
        loop.call_soon_threadsafe(_set_if_pending, fut, source)


class CancellationSignal:
    """A write-once cancellation signal with push notification.

    Thread-safe for ``trigger`` and the read-only properties. Callbacks
    registered through ``add_callback`` run synchronously on the triggering
    thread and must not raise. ``wait`` must be awaited on an event loop; the
    waiter is woken on its own loop even when the trigger comes from another
    thread.
    """

    def __init__(self, *, parents: Iterable["CancellationSignal"] = ()) -> None:
        self._state = State()
        self._lock = Lock()
        self._callbacks: List[TriggerCallback] = []
        self._waiters: List["asyncio.Future[TriggerSource]"] = []
        self._unsubscribers: List[Callable[[], None]] = []
        self._timers: List[asyncio.TimerHandle] = []
        for parent in parents:
            self._follow(parent)

    @classmethod
    def linked(cls, *parents: "CancellationSignal") -> "CancellationSignal":
        """Create a signal that triggers as soon as any parent triggers."""
        return cls(parents=parents)

    @property
    def triggered(self) -> bool:  # noqa: D401 - short form
        """Whether the signal has triggered."""
        return self._state.triggered

    @property
    def source(self) -> TriggerSource:  # noqa: D401 - short form
        """Source that triggered the signal (``NONE`` while untriggered)."""
        return self._state.source

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at trigger time (if any)."""
        return self._state.reason

    @property
    def armed_timers(self) -> int:
        """Number of timeout timers still pending on this signal."""
        return len(self._timers)

    def trigger(self, source: TriggerSource = TriggerSource.CALLER, reason: str | None = None) -> bool:
        """Trigger the signal; returns ``False`` if it had already triggered.

        The first trigger wins. Pending timers are disarmed, the signal detaches
        from its parents, every waiter is woken and every callback is invoked
        with ``source``.
        """
        if source is TriggerSource.NONE:
            raise ValueError("cannot trigger a signal with TriggerSource.NONE")
        with self._lock:
            if self._state.triggered:
                return False
            self._state.source = source
            self._state.reason = reason
            callbacks, self._callbacks = self._callbacks, []
            waiters, self._waiters = self._waiters, []
            unsubscribers, self._unsubscribers = self._unsubscribers, []
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
        for unsubscribe in unsubscribers:
            unsubscribe()
        for fut in waiters:
            _resolve(fut, source)
        for callback in callbacks:
            callback(source)
        return True

    def add_callback(self, callback: TriggerCallback) -> Callable[[], None]:
        """Register ``callback(source)`` to run on trigger.

        Runs immediately when the signal has already triggered. Returns a
        function removing the registration.
        """
        with self._lock:
            fire_now = self._state.triggered
            if not fire_now:
                self._callbacks.append(callback)
        if fire_now:
            callback(self._state.source)

        def _remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _remove

    def cancel_after(self, seconds: float, reason: str | None = None) -> None:
        """Arm a timer triggering the signal with ``TriggerSource.TIMEOUT``.

        Requires a running event loop. A non-positive duration triggers
        immediately. The timer is cancelled when the signal triggers from any
        source or is disposed.
        """
        reason = reason or f"deadline of {seconds:g}s exceeded"
        if seconds <= 0:
            self.trigger(TriggerSource.TIMEOUT, reason)
            return
        loop = asyncio.get_running_loop()
        handle = loop.call_later(seconds, self.trigger, TriggerSource.TIMEOUT, reason)
        with self._lock:
            if not self._state.triggered:
                self._timers.append(handle)
                return
        handle.cancel()

    async def wait(self) -> TriggerSource:
        """Suspend until the signal triggers and return the source."""
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._state.triggered:
                return self._state.source
            fut: "asyncio.Future[TriggerSource]" = loop.create_future()
            self._waiters.append(fut)
        try:
            return await fut
        finally:
            with self._lock:
                if fut in self._waiters:
                    self._waiters.remove(fut)

    def raise_if_triggered(self) -> None:
        """Raise ``CancelledError`` if the signal has triggered."""
        if self._state.triggered:
            raise CancelledError(self._state.source, self._state.reason)

    def child(self) -> "CancellationSignal":
        """Create and link a child signal (shortcut)."""
        return CancellationSignal(parents=(self,))

    def dispose(self) -> None:
        """Detach from parents and disarm timers without triggering."""
        with self._lock:
            unsubscribers, self._unsubscribers = self._unsubscribers, []
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
        for unsubscribe in unsubscribers:
            unsubscribe()

    def __enter__(self) -> "CancellationSignal":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def _follow(self, parent: "CancellationSignal") -> None:
        def _propagate(source: TriggerSource) -> None:
            self.trigger(source, parent.reason)

        remove = parent.add_callback(_propagate)
        with self._lock:
            if not self._state.triggered:
                self._unsubscribers.append(remove)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationSignal(source={self._state.source.value!r}, "
            f"reason={self._state.reason!r}, callbacks={len(self._callbacks)})"
        )


__all__ = ["CancellationSignal"]
