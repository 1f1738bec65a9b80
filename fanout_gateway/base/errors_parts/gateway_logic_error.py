"""Logic error raised for requests the gateway cannot run at all.

Examples: an empty target list handed to the aggregator, or a negative
iteration count. Distinct from upstream failures and cancellations; the
orchestrator maps it to a ``bad_request`` classification.
"""

from __future__ import annotations


class GatewayLogicError(ValueError):
    """Raised when a request is malformed before any upstream work starts."""


__all__ = ["GatewayLogicError"]
