"""Search endpoints: single-tier batch and the full tiered run."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from mediasift.domain.entities import SourceRegistryError, Tier
from mediasift.infrastructure.search import (
    aggregate,
    filter_by_source,
    summarize_sources,
)
from mediasift.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["search"])


def _is_prod(state: AppState) -> bool:
    return state.config.environment == "prod"


def _identity(request: Request, user: str | None) -> str | None:
    """Caller identity from ``?user=`` or ``Authorization: Bearer <name>``."""
    if user:
        return user
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def _failure(
    state: AppState, *, batch: str, error: Exception
) -> JSONResponse:
    content: dict[str, Any] = {
        "results": [],
        "batch": batch,
        "completed": False,
        "error": "Search failed",
    }
    if not _is_prod(state):
        content["details"] = str(error)
    return JSONResponse(status_code=500, content=content)


@router.get("/search/batch")
async def search_batch(
    request: Request,
    q: str = Query("", description="Search query"),
    batch: str = Query("high", description="Tier: high|medium|low"),
    user: str | None = Query(None, description="Caller identity"),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    tier = Tier.parse(batch)

    try:
        result = await state.batch_search_uc.execute(
            q, tier, _identity(request, user)
        )
    except SourceRegistryError as e:
        log.error("search_batch_failed", batch=tier.value, error=str(e))
        return _failure(state, batch=tier.value, error=e)

    max_age = state.config.search.response_cache_seconds
    return JSONResponse(
        content={
            "results": [r.to_dict() for r in result.results],
            "batch": result.tier.value,
            "completed": True,
            "cached": result.cached,
            "sites_searched": result.sites_searched,
            "total_results": result.total_results,
        },
        headers={"Cache-Control": f"public, max-age={max_age}"},
    )


@router.get("/search")
async def search_all(
    request: Request,
    q: str = Query("", description="Search query"),
    user: str | None = Query(None, description="Caller identity"),
    source: str = Query("all", description="Restrict results to one source key"),
) -> JSONResponse:
    """Run high, medium and low in sequence and return the merged view."""
    state = cast(AppState, request.app.state)

    progress = await state.tiered_search.collect(q, _identity(request, user))

    sources = summarize_sources(progress.results)
    results = filter_by_source(progress.results, source)
    groups = progress.groups if source == "all" else aggregate(results, q)

    return JSONResponse(
        content={
            "query": q,
            "results": [r.to_dict() for r in results],
            "groups": [g.to_dict() for g in groups],
            "sources": [
                {"key": s.key, "name": s.name, "count": s.count} for s in sources
            ],
            "stages": {
                tier.value: {
                    "state": report.state.value,
                    "cached": report.cached,
                    "sites_searched": report.sites_searched,
                    "result_count": report.result_count,
                    "skipped": report.skipped,
                    "error": report.error if not _is_prod(state) else None,
                }
                for tier, report in progress.stages.items()
            },
            "sites_searched": progress.sites_searched,
            "total_results": len(results),
            "short_circuited": progress.short_circuited,
        }
    )
