from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from fanout_gateway import __version__
from fanout_gateway.base.cancellation import CancellationSignal, CancelledError, run_cancellable
from fanout_gateway.base.errors import GatewayLogicError
from fanout_gateway.base.http import aclose_all_clients
from fanout_gateway.base.logging import LogContext, get_logger, normalized_log_event
from fanout_gateway.base.upstream import UpstreamTarget
from fanout_gateway.config.defaults import DEFAULT_PROVIDER_DELAY_MS, STATUS_CLIENT_CLOSED_REQUEST
from fanout_gateway.di import GatewayContainer, build_container
from fanout_gateway.orchestration import (
    GatewayResponse,
    InboundRequest,
    ResponseClassification,
    Workload,
    response_body,
)

from .app_parts import workloads
from .app_parts.disconnect import abort_signal_for

_logger = get_logger("gateway.service")

_FAILURE_MESSAGES: Dict[ResponseClassification, str] = {
    ResponseClassification.CLIENT_CLOSED_REQUEST: "Request was cancelled by the client",
    ResponseClassification.DEADLINE_EXCEEDED: "Request timed out",
    ResponseClassification.UPSTREAM_ERROR: "Upstream provider request failed",
    ResponseClassification.BAD_REQUEST: "Invalid request",
}


def get_container(request: Request) -> GatewayContainer:
    """FastAPI dependency returning the app's GatewayContainer."""
    return request.app.state.container


def _to_json(response: GatewayResponse, message: str, **extra: Any) -> JSONResponse:
    text = message if response.ok else _FAILURE_MESSAGES[response.classification]
    return JSONResponse(status_code=response.status_code, content={**response_body(response, text), **extra})


def _bad_request(inbound: InboundRequest, exc: GatewayLogicError) -> JSONResponse:
    rejected = GatewayResponse(
        ResponseClassification.BAD_REQUEST,
        body={"error": {"message": str(exc)}},
        request_id=inbound.request_id,
    )
    return _to_json(rejected, _FAILURE_MESSAGES[ResponseClassification.BAD_REQUEST])

async def _handle(
    http_request: Request,
    container: GatewayContainer,
    build: Callable[[InboundRequest], Workload],
    message: str,
    *,
    with_timeout: bool = False,
    detached: bool = False,
    **extra: Any,
) -> JSONResponse:
    """Run one demo workload through the orchestrator.

    ``detached`` hands the orchestrator a fresh abort signal that nothing
    triggers, which is how the uncooperative demos ignore the client.
    """
    async with abort_signal_for(http_request) as abort:
        inbound = InboundRequest(
            abort_signal=CancellationSignal() if detached else abort,
            params=dict(http_request.query_params),
        )
        try:
            workload = build(inbound)
            timeout_ms: Optional[int] = workloads.timeout_budget(inbound) if with_timeout else None
        except GatewayLogicError as exc:
            return _bad_request(inbound, exc)
        response = await container.orchestrator().handle(inbound, workload, timeout_ms)
    return _to_json(response, message, **extra)


def create_app(container: Optional[GatewayContainer] = None) -> FastAPI:
    """Build the demo FastAPI app around ``container`` (a default one when omitted)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.container.orchestrator().drain()
        await aclose_all_clients()

    app = FastAPI(title="Fan-out Gateway", version=__version__, lifespan=lifespan)
    app.state.container = container or build_container()

    # -----------------------------------------------------------------------
    # Simulated provider
    # -----------------------------------------------------------------------

    @app.get("/provider/pricing")
    async def provider_pricing(request: Request, container: GatewayContainer = Depends(get_container)):
        """Quote a price after ``delayMs``; aborts the wait when the client leaves."""
        ctx = LogContext(operation="provider.pricing")
        inbound = InboundRequest(params=dict(request.query_params))
        try:
            delay_ms = inbound.int_param("delayMs", DEFAULT_PROVIDER_DELAY_MS)
        except GatewayLogicError as exc:
            return _bad_request(inbound, exc)
        async with abort_signal_for(request) as abort:
            try:
                payload = await run_cancellable(
                    container.pricing_backend().fetch(UpstreamTarget("pricing", latency_ms=delay_ms)),
                    abort,
                )
            except CancelledError as exc:
                normalized_log_event(_logger, "provider.cancelled", ctx, phase="cancel", cancelled_by=exc.source)
                return JSONResponse(status_code=STATUS_CLIENT_CLOSED_REQUEST, content={"message": "cancelled"})
        return payload.to_dict()

    # -----------------------------------------------------------------------
    # Signal propagation into an upstream call
    # -----------------------------------------------------------------------

    @app.get("/offers/good")
    async def offers_good(request: Request, container: GatewayContainer = Depends(get_container)):
        """Propagates the abort signal: the upstream call stops when the client leaves."""
        return await _handle(request, container, workloads.single_call, "Flight offers retrieved")

    @app.get("/offers/bad")
    async def offers_bad(request: Request, container: GatewayContainer = Depends(get_container)):
        """Ignores the abort signal: the upstream call always runs to completion."""
        caller = container.non_cancellable_caller()
        return await _handle(
            request,
            container,
            lambda inbound: workloads.single_call(inbound, caller=caller),
            "Flight offers retrieved",
        )

    # -----------------------------------------------------------------------
    # Cooperative loops
    # -----------------------------------------------------------------------

    @app.get("/combinations/good")
    async def combinations_good(request: Request, container: GatewayContainer = Depends(get_container)):
        """Checks the signal before every day and inside each unit."""
        return await _handle(
            request,
            container,
            lambda inbound: workloads.combinations(inbound, cooperative=True),
            "All combinations processed",
        )

    @app.get("/combinations/bad")
    async def combinations_bad(request: Request, container: GatewayContainer = Depends(get_container)):
        """Runs every day even after the client went away."""
        return await _handle(
            request,
            container,
            lambda inbound: workloads.combinations(inbound, cooperative=False),
            "All combinations processed",
            detached=True,
        )

    # -----------------------------------------------------------------------
    # Linked signals: caller abort or deadline
    # -----------------------------------------------------------------------

    @app.get("/offers/timeout")
    async def offers_timeout(request: Request, container: GatewayContainer = Depends(get_container)):
        """``timeoutMs`` budget (default 2000) against ``providerDelayMs`` (default 5000)."""
        return await _handle(
            request,
            container,
            workloads.single_call,
            "Flight offers retrieved",
            with_timeout=True,
        )

    # -----------------------------------------------------------------------
    # Fan-out aggregation
    # -----------------------------------------------------------------------

    @app.get("/offers/aggregate")
    async def offers_aggregate(request: Request, container: GatewayContainer = Depends(get_container)):
        return await _handle(request, container, workloads.aggregate, "Aggregated provider results")

    @app.get("/offers/parallel")
    async def offers_parallel(request: Request, container: GatewayContainer = Depends(get_container)):
        return await _handle(
            request,
            container,
            workloads.parallel,
            "All providers queried in parallel",
            note="Providers were queried concurrently; total time tracks the slowest provider, not the sum.",
        )

    # -----------------------------------------------------------------------
    # Info, health and metrics
    # -----------------------------------------------------------------------

    @app.get("/")
    def info() -> Dict[str, Any]:
        return {
            "message": "Fan-out gateway cancellation demo",
            "endpoints": {
                "provider": "/provider/pricing?delayMs=3000",
                "offers_bad": "/offers/bad (does NOT propagate cancellation)",
                "offers_good": "/offers/good (propagates cancellation)",
                "combinations_bad": "/combinations/bad?days=30 (does NOT check cancellation in loop)",
                "combinations_good": "/combinations/good?days=30 (checks cancellation in loop)",
                "timeout": "/offers/timeout?timeoutMs=2000&providerDelayMs=5000 (linked cancellation)",
                "aggregate": "/offers/aggregate?providerCount=3&providerDelayMs=2000&policy=best-effort",
                "parallel": "/offers/parallel",
            },
        }

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        """Check the health status of the service."""
        return {"ok": True}

    @app.get("/api/metrics/summary")
    def get_metrics_summary(container: GatewayContainer = Depends(get_container)) -> Dict[str, Any]:
        """Return the in-memory upstream call counters."""
        return {"ok": True, "summary": container.counters().as_dict()}

    return app


app = create_app()
