"""Port for resolving the set of upstream search providers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mediasift.domain.entities import ProviderDescriptor, TierProviders


@runtime_checkable
class SourceRegistryPort(Protocol):
    """Supplies providers partitioned by tier.

    Implementations raise on backend failure; callers translate that
    into ``SourceRegistryError``.
    """

    async def get_providers(self, exclude_adult: bool) -> TierProviders:
        """Return enabled providers by tier, optionally without adult ones."""
        ...

    def get(self, key: str) -> ProviderDescriptor:
        """Return a single provider by key. Raises ``SourceNotFound``."""
        ...
