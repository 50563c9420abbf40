"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from mediasift.infrastructure.config import AppConfig
from mediasift.interfaces.app_state import AppState
from mediasift.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app from config only.

    Resources (cache, HTTP client, registry) are created in lifespan().
    """
    app = FastAPI(
        title="MediaSift",
        description="Tiered fan-out search over video-list providers",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from mediasift.interfaces.api.admin.router import router as admin_router
    from mediasift.interfaces.api.debug.router import router as debug_router
    from mediasift.interfaces.api.search.router import router as search_router

    app.include_router(search_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")
    app.include_router(debug_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(response, "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
