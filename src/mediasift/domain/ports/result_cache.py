"""Result Cache Port - time-bounded store of completed tier batches."""

from __future__ import annotations

from typing import Protocol, Sequence

from mediasift.domain.entities import ResultRecord, Tier


class ResultCachePort(Protocol):
    """Keyed by the fingerprint of (normalized query, tier, identity).

    Implementations:
      - ResultCache (in-process, TTL-bounded, background sweep)
    """

    def lookup(
        self, query: str, tier: Tier | None, identity: str | None
    ) -> tuple[ResultRecord, ...] | None:
        """Cached records, or None on miss / expired entry."""
        ...

    def store(
        self,
        query: str,
        results: Sequence[ResultRecord],
        tier: Tier | None,
        identity: str | None,
    ) -> None:
        """Write/overwrite the entry with ``created_at = now``."""
        ...

    def sweep(self) -> int:
        """Drop every expired entry, returning how many were removed."""
        ...

    def clear(self) -> None: ...

    def stats(self) -> dict[str, object]: ...
