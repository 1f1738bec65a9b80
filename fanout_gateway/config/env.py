"""fanout_gateway.config.env
==========================

Centralized environment variable mapping for the gateway service.

Purpose
-------
- Single source of truth for the names of the ``GATEWAY_*`` variables read
  outside the timeout module.
- Small helpers returning parsed values with documented fallbacks.

Failure Modes
-------------
Helpers never raise on unset or malformed values; they fall back to the
defaults in ``config.defaults``.
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Tuple

from .defaults import GATEWAY_SERVICE_DEFAULT_HOST, GATEWAY_SERVICE_DEFAULT_PORT

ENV_MAP: Dict[str, str] = {
    "provider_base_url": "GATEWAY_PROVIDER_BASE_URL",
    "service_host": "GATEWAY_SERVICE_HOST",
    "service_port": "GATEWAY_SERVICE_PORT",
    "service_reload": "GATEWAY_SERVICE_RELOAD",
    "log_level": "GATEWAY_LOG_LEVEL",
    "log_file": "GATEWAY_LOG_FILE",
}


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_port(value: Optional[str], default: int) -> int:
    """Best-effort parse of a port from string, falling back to a sane default."""
    if not value:
        return default
    try:
        port = int(value)
    except ValueError:
        return default
    return port if 0 < port < 65536 else default


def resolve_provider_base_url() -> Optional[str]:
    """Return the base URL of a real pricing provider, if one is configured.

    When unset, the gateway uses the in-process simulated provider.
    """
    raw = os.getenv(ENV_MAP["provider_base_url"], "").strip()
    return raw.rstrip("/") or None


def resolve_service_bind() -> Tuple[str, int, bool]:
    """Return ``(host, port, reload)`` for the development server."""
    host = os.getenv(ENV_MAP["service_host"]) or GATEWAY_SERVICE_DEFAULT_HOST
    port = _parse_port(os.getenv(ENV_MAP["service_port"]), GATEWAY_SERVICE_DEFAULT_PORT)
    reload_enabled = _parse_bool(os.getenv(ENV_MAP["service_reload"]), default=False)
    return host, port, reload_enabled


def resolve_log_file() -> Optional[str]:
    return os.getenv(ENV_MAP["log_file"]) or None


__all__ = [
    "ENV_MAP",
    "resolve_provider_base_url",
    "resolve_service_bind",
    "resolve_log_file",
]
