"""Unified timeout configuration for the gateway.

This module centralizes the timeout values used by the request orchestrator,
the HTTP client pool and the service's disconnect watcher.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and again only when the variables change. Supported environment
    variables (all optional):
        GATEWAY_TIMEOUT_HTTP_SECONDS
        GATEWAY_TIMEOUT_BUDGET_MS
        GATEWAY_DISCONNECT_POLL_SECONDS

Design Constraints
------------------
1. No hard-coded ad-hoc timeouts outside this module and ``config.defaults``.
2. Avoid per-call env parsing (cache after first read).
3. Timeouts never preempt work: a budget only arms a ``TIMEOUT`` trigger on
   the request's cancellation signal.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from ..config.defaults import (
    DEFAULT_DISCONNECT_POLL_SECONDS,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
)

_ENV_VARS = (
    "GATEWAY_TIMEOUT_HTTP_SECONDS",
    "GATEWAY_TIMEOUT_BUDGET_MS",
    "GATEWAY_DISCONNECT_POLL_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values.

    Attributes:
        http_timeout_seconds: Transport-level timeout of pooled HTTP clients.
            Independent from request budgets; guards against hung sockets.
        default_budget_ms: Request budget applied by the orchestrator when the
            caller does not pass one. ``None`` means no deadline.
        disconnect_poll_seconds: Interval at which the service checks whether
            the inbound client went away.
    """

    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    default_budget_ms: int | None = None
    disconnect_poll_seconds: float = DEFAULT_DISCONNECT_POLL_SECONDS


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse an environment variable as a positive float with a fallback default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_VARS)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED

    http = _parse_env_float("GATEWAY_TIMEOUT_HTTP_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)
    budget = _parse_env_float("GATEWAY_TIMEOUT_BUDGET_MS", None)
    poll = _parse_env_float("GATEWAY_DISCONNECT_POLL_SECONDS", DEFAULT_DISCONNECT_POLL_SECONDS)

    _CACHED = TimeoutConfig(
        http_timeout_seconds=float(http),
        default_budget_ms=int(budget) if budget is not None else None,
        disconnect_poll_seconds=float(poll),
    )
    _ENV_GUARD = guard
    return _CACHED


def budget_seconds(timeout_ms: int | None) -> float | None:
    """Convert a millisecond budget to seconds, falling back to the config default."""
    if timeout_ms is None:
        timeout_ms = get_timeout_config().default_budget_ms
    if timeout_ms is None:
        return None
    return max(0, timeout_ms) / 1000.0


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "budget_seconds",
]
