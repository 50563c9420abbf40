"""Source registry backed by the ``sources`` config section."""

from __future__ import annotations

from typing import Iterable

import structlog

from mediasift.domain.entities import (
    ProviderDescriptor,
    SourceNotFound,
    Tier,
    TierProviders,
)
from mediasift.infrastructure.config.schema import SourceConfig

log = structlog.get_logger(__name__)


class ConfigSourceRegistry:
    """Serves providers from static configuration.

    Disabled sources are dropped at construction time; tier order
    within each partition follows config order.
    """

    def __init__(self, sources: Iterable[SourceConfig]) -> None:
        self._providers: dict[str, ProviderDescriptor] = {}
        for source in sources:
            if source.disabled:
                log.info("source_disabled_by_config", source=source.key)
                continue
            self._providers[source.key] = ProviderDescriptor(
                key=source.key,
                name=source.name or source.key,
                tier=source.tier,
                is_adult=source.is_adult,
                api=source.api,
            )
        log.info("source_registry_loaded", count=len(self._providers))

    def __len__(self) -> int:
        return len(self._providers)

    def list_keys(self) -> list[str]:
        return list(self._providers)

    def get(self, key: str) -> ProviderDescriptor:
        try:
            return self._providers[key]
        except KeyError:
            raise SourceNotFound(key) from None

    async def get_providers(self, exclude_adult: bool) -> TierProviders:
        buckets: dict[Tier, list[ProviderDescriptor]] = {t: [] for t in Tier}
        for provider in self._providers.values():
            if exclude_adult and provider.is_adult:
                continue
            buckets[provider.tier].append(provider)
        return TierProviders(
            high=tuple(buckets[Tier.HIGH]),
            medium=tuple(buckets[Tier.MEDIUM]),
            low=tuple(buckets[Tier.LOW]),
        )
