"""fanout_gateway.config.defaults
==============================

Central place for small, stable default values used across the gateway core
and the demo service. These defaults can be overridden via query parameters
or environment variables, but provide sensible fallbacks for local
development and tests.

This module intentionally avoids importing from other gateway packages to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Timeouts ----
# Transport-level timeout for pooled HTTP clients (seconds).
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
# How often the service checks for a client disconnect (seconds).
DEFAULT_DISCONNECT_POLL_SECONDS = 0.05
# Deadline used by /offers/timeout when the caller does not pass timeoutMs.
DEFAULT_TIMEOUT_MS = 2000


# ---- Simulated providers ----
# Delay of /provider/pricing when delayMs is omitted.
DEFAULT_PROVIDER_DELAY_MS = 3000
# Slow provider used by the single-call demos (/offers/good, /offers/bad, /offers/timeout).
DEFAULT_SLOW_PROVIDER_DELAY_MS = 5000
# Fan-out demo defaults (/offers/aggregate).
DEFAULT_PROVIDER_COUNT = 3
DEFAULT_AGGREGATE_DELAY_MS = 2000
MAX_PROVIDER_COUNT = 50
# Fixed staggered latencies of the /offers/parallel demo.
PARALLEL_DEMO_LATENCIES_MS = (1000, 1500, 2000)
# Simulated price range (inclusive) and currency.
PRICE_MIN = 100
PRICE_MAX = 1000
DEFAULT_CURRENCY = "USD"


# ---- Cooperative loop demo ----
DEFAULT_LOOP_DAYS = 30
DEFAULT_LOOP_UNIT_DELAY_MS = 200
COMBINATIONS_PER_DAY = 100
# Emit a progress event every N completed units.
LOOP_PROGRESS_EVERY = 10


# ---- Response classification ----
# Non-standard "Client Closed Request" status used for caller aborts.
STATUS_CLIENT_CLOSED_REQUEST = 499
STATUS_DEADLINE_EXCEEDED = 504
STATUS_UPSTREAM_ERROR = 502
STATUS_BAD_REQUEST = 400


# ---- Service ----
GATEWAY_SERVICE_DEFAULT_HOST = "127.0.0.1"
GATEWAY_SERVICE_DEFAULT_PORT = 8091


__all__ = [
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_DISCONNECT_POLL_SECONDS",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_PROVIDER_DELAY_MS",
    "DEFAULT_SLOW_PROVIDER_DELAY_MS",
    "DEFAULT_PROVIDER_COUNT",
    "DEFAULT_AGGREGATE_DELAY_MS",
    "MAX_PROVIDER_COUNT",
    "PARALLEL_DEMO_LATENCIES_MS",
    "PRICE_MIN",
    "PRICE_MAX",
    "DEFAULT_CURRENCY",
    "DEFAULT_LOOP_DAYS",
    "DEFAULT_LOOP_UNIT_DELAY_MS",
    "COMBINATIONS_PER_DAY",
    "LOOP_PROGRESS_EVERY",
    "STATUS_CLIENT_CLOSED_REQUEST",
    "STATUS_DEADLINE_EXCEEDED",
    "STATUS_UPSTREAM_ERROR",
    "STATUS_BAD_REQUEST",
    "GATEWAY_SERVICE_DEFAULT_HOST",
    "GATEWAY_SERVICE_DEFAULT_PORT",
]
