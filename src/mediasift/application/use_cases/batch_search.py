"""Single-tier batch search with result caching (``get_batch``)."""

from __future__ import annotations

import structlog

from mediasift.domain.entities import (
    ANONYMOUS_IDENTITY,
    BatchResult,
    ProviderDescriptor,
    ResultRecord,
    SourceRegistryError,
    Tier,
    TierOutcome,
)
from mediasift.domain.ports import (
    ResultCachePort,
    SourceRegistryPort,
    TierExecutorPort,
    UserPreferencesPort,
)

log = structlog.get_logger(__name__)


class BatchSearchUseCase:
    """Searches the providers of one tier, short-circuiting on cache hits.

    Flow:
        1. Empty query -> empty result, no provider calls
        2. Cache lookup by (query, tier, identity)
        3. Resolve adult filter for the identity (default: filter)
        4. Resolve tier providers from the source registry
        5. Fan out under the tier timeout
        6. Cache the tier outcome if at least one provider answered
    """

    def __init__(
        self,
        *,
        registry: SourceRegistryPort,
        executor: TierExecutorPort,
        cache: ResultCachePort | None = None,
        preferences: UserPreferencesPort | None = None,
    ) -> None:
        """Initialize use case with dependencies.

        Args:
            registry: Source registry supplying providers per tier.
            executor: Concurrent per-tier fan-out.
            cache: Optional result cache; failures degrade to a miss.
            preferences: Optional per-user adult-content filter store.
        """
        self._registry = registry
        self._executor = executor
        self._cache = cache
        self._preferences = preferences

    async def execute(
        self,
        query: str,
        tier: Tier | str | None = Tier.HIGH,
        identity: str | None = None,
    ) -> BatchResult:
        """Run one tier of the search.

        Raises:
            SourceRegistryError: Providers could not be resolved.
        """
        tier = Tier.parse(tier)
        query = query.strip() if query else ""
        if not query:
            return BatchResult(tier=tier)

        cached = self._cache_read(query, tier, identity)
        if cached is not None:
            return BatchResult(tier=tier, results=cached, cached=True)

        exclude_adult = await self._adult_filter(identity)
        providers = await self._resolve_providers(tier, exclude_adult)
        if not providers:
            log.info("batch_search_no_providers", tier=tier.value, query=query)
            return BatchResult(tier=tier)

        outcome = await self._executor.run_tier(
            providers, query, self._executor.timeout_for(tier)
        )
        if outcome.completed:
            self._cache_write(query, tier, identity, outcome)
        else:
            log.info(
                "batch_search_not_cached",
                tier=tier.value,
                query=query,
                reason="no provider answered",
            )

        log.info(
            "batch_search_completed",
            tier=tier.value,
            query=query,
            sites_searched=len(providers),
            result_count=len(outcome.records),
        )
        return BatchResult(
            tier=tier,
            results=tuple(outcome.records),
            cached=False,
            sites_searched=len(providers),
        )

    async def _adult_filter(self, identity: str | None) -> bool:
        if not identity or self._preferences is None:
            return True
        try:
            return await self._preferences.get_adult_filter(identity)
        except Exception:
            log.warning(
                "user_preferences_error",
                identity=identity,
                fallback=True,
                exc_info=True,
            )
            return True

    async def _resolve_providers(
        self, tier: Tier, exclude_adult: bool
    ) -> tuple[ProviderDescriptor, ...]:
        try:
            batched = await self._registry.get_providers(exclude_adult)
        except Exception as e:
            log.error("source_registry_error", tier=tier.value, exc_info=True)
            raise SourceRegistryError(f"Cannot resolve providers: {e!s}") from e
        return tuple(batched.for_tier(tier))

    def _cache_read(
        self, query: str, tier: Tier, identity: str | None
    ) -> tuple[ResultRecord, ...] | None:
        """Try to read a cached batch. Returns None on miss or error."""
        if self._cache is None:
            return None
        try:
            cached = self._cache.lookup(query, tier, identity)
        except Exception:
            log.warning("result_cache_read_error", tier=tier.value, exc_info=True)
            return None
        if cached is not None:
            log.info(
                "result_cache_hit",
                tier=tier.value,
                query=query,
                identity=identity or ANONYMOUS_IDENTITY,
                result_count=len(cached),
            )
        return cached

    def _cache_write(
        self,
        query: str,
        tier: Tier,
        identity: str | None,
        outcome: TierOutcome,
    ) -> None:
        """Store a completed tier outcome. Errors are logged and ignored."""
        if self._cache is None:
            return
        try:
            self._cache.store(query, outcome.records, tier, identity)
        except Exception:
            log.warning("result_cache_store_error", tier=tier.value, exc_info=True)
