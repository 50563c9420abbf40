"""Port for the concurrent per-tier fan-out."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from mediasift.domain.entities import ProviderDescriptor, Tier, TierOutcome


@runtime_checkable
class TierExecutorPort(Protocol):
    def timeout_for(self, tier: Tier | str | None) -> float: ...

    async def run_tier(
        self,
        providers: Iterable[ProviderDescriptor],
        query: str,
        timeout: float,
    ) -> TierOutcome: ...
