"""Step-by-step configuration diagnostics."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request

from mediasift.domain.entities import TIER_ORDER
from mediasift.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/config")
async def debug_config(request: Request) -> dict[str, Any]:
    """Report what the search path would see, one step at a time.

    A failing step records its error and the remaining steps still run.
    """
    state = cast(AppState, request.app.state)
    config = state.config
    steps: list[dict[str, Any]] = []

    try:
        providers = await state.registry.get_providers(exclude_adult=True)
        steps.append(
            {
                "step": "source_registry",
                "success": True,
                "counts": providers.counts(),
                "keys": {
                    tier.value: [p.key for p in providers.for_tier(tier)]
                    for tier in TIER_ORDER
                },
            }
        )
    except Exception as e:
        log.warning("debug_step_failed", step="source_registry", exc_info=True)
        steps.append({"step": "source_registry", "success": False, "error": str(e)})

    try:
        steps.append(
            {
                "step": "result_cache",
                "success": True,
                "running": state.result_cache.running,
                "ttl_seconds": state.result_cache.ttl_seconds,
                **state.result_cache.stats(),
            }
        )
    except Exception as e:
        log.warning("debug_step_failed", step="result_cache", exc_info=True)
        steps.append({"step": "result_cache", "success": False, "error": str(e)})

    steps.append(
        {
            "step": "search_settings",
            "success": True,
            "tier_timeouts": {
                tier.value: state.executor.timeout_for(tier) for tier in TIER_ORDER
            },
            "short_circuit_min_results": config.search.short_circuit_min_results,
            "response_cache_seconds": config.search.response_cache_seconds,
        }
    )

    return {
        "environment": config.environment,
        "success": all(step["success"] for step in steps),
        "steps": steps,
    }
