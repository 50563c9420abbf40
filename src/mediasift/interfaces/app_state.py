"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

import httpx
from starlette.datastructures import State

from mediasift.application.use_cases import BatchSearchUseCase, TieredSearch
from mediasift.infrastructure.cache import ResultCache
from mediasift.infrastructure.config import AppConfig
from mediasift.infrastructure.search import TierFanoutExecutor
from mediasift.infrastructure.sources import (
    ConfigSourceRegistry,
    ConfigUserPreferences,
    SourceProbe,
)


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    result_cache: ResultCache
    http_client: httpx.AsyncClient

    # Domain ports
    registry: ConfigSourceRegistry
    preferences: ConfigUserPreferences
    executor: TierFanoutExecutor

    # Application services
    batch_search_uc: BatchSearchUseCase
    tiered_search: TieredSearch

    # Speed test
    probe: SourceProbe
