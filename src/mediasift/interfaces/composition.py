"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from mediasift.application.use_cases import BatchSearchUseCase, TieredSearch
from mediasift.infrastructure.cache import ResultCache
from mediasift.infrastructure.config import AppConfig
from mediasift.infrastructure.search import TierFanoutExecutor
from mediasift.infrastructure.sources import (
    ConfigSourceRegistry,
    ConfigUserPreferences,
    HttpxUpstreamAdapter,
    SourceProbe,
)
from mediasift.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def wire_services(state: AppState, config: AppConfig) -> None:
    """Build registry, executor and use cases on top of cache + HTTP client.

    Split out of :func:`lifespan` so tests can wire a state around their
    own (mocked) HTTP client without running the ASGI lifespan.
    """
    state.registry = ConfigSourceRegistry(config.sources)
    state.preferences = ConfigUserPreferences(config.users)
    log.info("source_registry_initialized", count=len(state.registry))

    state.executor = TierFanoutExecutor(
        upstream=HttpxUpstreamAdapter(http_client=state.http_client),
        tier_timeouts=config.search.tier_timeouts,
    )

    state.batch_search_uc = BatchSearchUseCase(
        registry=state.registry,
        executor=state.executor,
        cache=state.result_cache,
        preferences=state.preferences,
    )
    state.tiered_search = TieredSearch(
        state.batch_search_uc.execute,
        short_circuit_min_results=config.search.short_circuit_min_results,
    )
    state.probe = SourceProbe(
        state.http_client, timeout=config.search.probe_timeout_seconds
    )
    log.info("search_services_initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Result cache (sweep task needs the running loop)
        2. HTTP client (shared by upstream adapter and speed test)
        3. Registry, executor, use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Result cache
    state.result_cache = ResultCache(
        ttl_seconds=config.cache.ttl_seconds,
        sweep_interval_seconds=config.cache.sweep_interval_seconds,
        max_entries=config.cache.max_entries,
    )
    await state.result_cache.__aenter__()
    log.info("result_cache_started", ttl_seconds=config.cache.ttl_seconds)

    # 2) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized")

    # 3) Services
    wire_services(state, config)

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.result_cache.aclose()

        log.info("app_shutdown_complete")
