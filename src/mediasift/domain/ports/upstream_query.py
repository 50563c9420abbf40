"""Port for querying a single upstream provider."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mediasift.domain.entities import ProviderDescriptor, ResultRecord


@runtime_checkable
class UpstreamQueryPort(Protocol):
    """Performs one network call to one provider.

    May raise (transport error, malformed payload) or return late; the
    tier executor races every call against the tier timeout.
    """

    async def query(
        self, provider: ProviderDescriptor, query: str
    ) -> list[ResultRecord]: ...
