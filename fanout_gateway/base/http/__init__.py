"""HTTP utilities for upstream transports."""

from .client import aclose_all_clients, get_async_client, pooled_client_count

__all__ = ["get_async_client", "aclose_all_clients", "pooled_client_count"]
