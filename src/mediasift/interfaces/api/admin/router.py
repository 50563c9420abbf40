"""Operator endpoints: result cache inspection and provider speed test."""

from __future__ import annotations

from dataclasses import asdict
from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from mediasift.domain.entities import SourceNotFound
from mediasift.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/cache")
async def cache_stats(request: Request) -> dict[str, object]:
    state = cast(AppState, request.app.state)
    return state.result_cache.stats()


@router.delete("/cache")
async def cache_clear(request: Request) -> dict[str, object]:
    state = cast(AppState, request.app.state)
    removed = len(state.result_cache)
    state.result_cache.clear()
    log.info("result_cache_cleared", removed=removed)
    return {"cleared": removed}


@router.get("/speed-test/{source_key}")
async def speed_test(request: Request, source_key: str) -> JSONResponse:
    """Time one GET against a configured provider's API URL.

    Only configured source keys can be probed; arbitrary URLs are rejected.
    """
    state = cast(AppState, request.app.state)

    try:
        provider = state.registry.get(source_key)
    except SourceNotFound:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "source not found"},
        )

    result = await state.probe.probe(provider)
    return JSONResponse(content={"source": source_key, **asdict(result)})
