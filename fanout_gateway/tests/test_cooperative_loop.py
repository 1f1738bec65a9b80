"""Behavioral tests for ``CooperativeLoop``.

The headline scenario runs ten 200ms units and triggers a caller abort at
650ms: three units complete, the fourth is interrupted at its suspension
point, and no further unit starts.
"""
from __future__ import annotations

import asyncio

import pytest

from fanout_gateway.base.cancellation import (
    CancellationSignal,
    TriggerSource,
    cancellable_sleep,
)
from fanout_gateway.base.loop import CooperativeLoop


def _cooperative_units(count, delay_s, started):
    def make(i):
        async def unit(signal):
            started.append(i)
            await cancellable_sleep(delay_s, signal)
            return i

        return unit

    return [make(i) for i in range(count)]


def _uncooperative_units(count, delay_s, started):
    def make(i):
        async def unit(signal):
            started.append(i)
            await asyncio.sleep(delay_s)
            return i

        return unit

    return [make(i) for i in range(count)]


def test_caller_abort_mid_loop_stops_after_three_units():
    started = []

    async def scenario():
        signal = CancellationSignal()
        asyncio.get_running_loop().call_later(0.65, signal.trigger, TriggerSource.CALLER)
        return await CooperativeLoop(signal).run(_cooperative_units(10, 0.2, started))

    report = asyncio.run(scenario())
    assert report.units_completed == 3  # nosec B101 - pytest assert in tests
    assert report.stopped_due_to is TriggerSource.CALLER  # nosec B101 - pytest assert in tests
    assert report.results == (0, 1, 2)  # nosec B101 - pytest assert in tests
    # The interrupted fourth unit started; nothing after it did.
    assert started == [0, 1, 2, 3]  # nosec B101 - pytest assert in tests
    assert report.completed is False  # nosec B101 - pytest assert in tests


def test_unit_ignoring_signal_finishes_and_loop_stops_at_next_check():
    started = []

    async def scenario():
        signal = CancellationSignal()
        asyncio.get_running_loop().call_later(0.65, signal.trigger, TriggerSource.CALLER)
        return await CooperativeLoop(signal).run(_uncooperative_units(10, 0.2, started))

    report = asyncio.run(scenario())
    assert report.units_completed == 4  # nosec B101 - pytest assert in tests
    assert report.stopped_due_to is TriggerSource.CALLER  # nosec B101 - pytest assert in tests
    assert started == [0, 1, 2, 3]  # nosec B101 - pytest assert in tests


def test_loop_runs_to_completion_without_trigger():
    started = []

    async def scenario():
        return await CooperativeLoop(CancellationSignal()).run(_cooperative_units(5, 0, started))

    report = asyncio.run(scenario())
    assert report.completed is True  # nosec B101 - pytest assert in tests
    assert report.units_completed == 5  # nosec B101 - pytest assert in tests
    assert report.stopped_due_to is TriggerSource.NONE  # nosec B101 - pytest assert in tests
    assert report.to_dict()["stopped_due_to"] == "none"  # nosec B101 - pytest assert in tests


def test_pre_triggered_signal_runs_no_unit():
    started = []
    signal = CancellationSignal()
    signal.trigger(TriggerSource.TIMEOUT)

    report = asyncio.run(CooperativeLoop(signal).run(_cooperative_units(3, 0, started)))
    assert report.units_completed == 0  # nosec B101 - pytest assert in tests
    assert report.stopped_due_to is TriggerSource.TIMEOUT  # nosec B101 - pytest assert in tests
    assert started == []  # nosec B101 - pytest assert in tests


def test_unbounded_async_source_is_not_pulled_after_trigger():
    pulled = []

    async def units():
        n = 0
        while True:
            n += 1
            pulled.append(n)

            async def unit(signal, n=n):
                if n == 3:
                    signal.trigger(TriggerSource.TIMEOUT)
                return n

            yield unit

    async def scenario():
        return await CooperativeLoop(CancellationSignal()).run(units())

    report = asyncio.run(scenario())
    assert report.units_completed == 3  # nosec B101 - pytest assert in tests
    assert report.stopped_due_to is TriggerSource.TIMEOUT  # nosec B101 - pytest assert in tests
    assert pulled == [1, 2, 3]  # nosec B101 - pytest assert in tests


def test_non_cancellation_errors_propagate_unchanged():
    async def boom(signal):
        raise RuntimeError("unit failed")

    async def scenario():
        await CooperativeLoop(CancellationSignal()).run([boom])

    with pytest.raises(RuntimeError, match="unit failed"):
        asyncio.run(scenario())


def test_early_stop_closes_async_unit_source():
    closed = []

    async def units():
        try:
            n = 0
            while True:
                n += 1

                async def unit(signal, n=n):
                    if n == 2:
                        signal.trigger(TriggerSource.CALLER)
                    return n

                yield unit
        finally:
            closed.append("async")

    report = asyncio.run(CooperativeLoop(CancellationSignal()).run(units()))
    assert report.stopped_due_to is TriggerSource.CALLER  # nosec B101 - pytest assert in tests
    assert closed == ["async"]  # nosec B101 - pytest assert in tests


def test_early_stop_closes_sync_unit_generator():
    closed = []

    def units():
        try:
            for n in range(10):

                async def unit(signal, n=n):
                    if n == 1:
                        signal.trigger(TriggerSource.TIMEOUT)
                    return n

                yield unit
        finally:
            closed.append("sync")

    report = asyncio.run(CooperativeLoop(CancellationSignal()).run(units()))
    assert report.units_completed == 2  # nosec B101 - pytest assert in tests
    assert closed == ["sync"]  # nosec B101 - pytest assert in tests
