"""Focused tests for UpstreamCallCounters behavior.

Covers lifecycle counters, latency aggregation, failure code and cancel
source bucketing, snapshot reset semantics, and the monotonic_ms helper.
"""
from __future__ import annotations

from fanout_gateway.base.metrics import UpstreamCallCounters


def test_counters_lifecycle_and_latency_aggregation():
    c = UpstreamCallCounters(scope="pricing")

    for _ in range(4):
        c.record_start()
    c.record_success(latency_ms=120)
    c.record_failure("rate_limit", latency_ms=80)
    c.record_cancelled("caller")
    c.record_cancelled("timeout")

    snap = c.snapshot(reset=False)
    assert snap.scope == "pricing"  # nosec B101
    assert snap.total == 4  # nosec B101
    assert snap.success == 1 and snap.failure == 1 and snap.cancelled == 2  # nosec B101
    assert snap.in_flight == 0  # nosec B101
    assert snap.failure_by_code == {"rate_limit": 1}  # nosec B101
    assert snap.cancelled_by_source == {"caller": 1, "timeout": 1}  # nosec B101

    # Cancellations are not latency samples: min=80, max=120, avg=100.
    lat = snap.latency
    assert lat.count == 2 and lat.total_ms == 200  # nosec B101
    assert lat.min_ms == 80 and lat.max_ms == 120  # nosec B101
    assert abs((lat.avg_ms or 0) - 100.0) < 1e-9  # nosec B101


def test_snapshot_reset_zeroes_counters_but_preserves_inflight():
    c = UpstreamCallCounters()
    c.record_start()
    snap = c.snapshot(reset=True)
    assert snap.total == 1 and snap.in_flight == 1  # nosec B101
    after = c.snapshot(reset=False)
    assert after.total == 0 and after.in_flight == 1  # nosec B101
    c.record_success(latency_ms=10)
    final = c.snapshot(reset=False)
    assert final.in_flight == 0 and final.success == 1 and final.total == 0  # nosec B101


def test_as_dict_is_json_ready():
    c = UpstreamCallCounters()
    c.record_start()
    c.record_failure("timeout")
    data = c.as_dict()
    assert data["failure_by_code"] == {"timeout": 1}  # nosec B101
    assert data["latency"]["count"] == 0 and data["latency"]["avg_ms"] is None  # nosec B101


def test_monotonic_ms_is_non_decreasing():
    a = UpstreamCallCounters.monotonic_ms()
    b = UpstreamCallCounters.monotonic_ms()
    assert b >= a  # nosec B101
