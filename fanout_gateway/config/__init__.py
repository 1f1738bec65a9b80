"""Configuration helpers and defaults for the gateway."""

from .env import resolve_log_file, resolve_provider_base_url, resolve_service_bind

__all__ = ["resolve_provider_base_url", "resolve_service_bind", "resolve_log_file"]
