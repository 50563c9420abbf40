"""Domain entities for tiered multi-source title search.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNKNOWN_YEAR = "unknown"
ANONYMOUS_IDENTITY = "anonymous"


class Tier(str, Enum):
    """Priority class of an upstream provider."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, value: str | Tier | None) -> Tier:
        """Lenient parse: unknown or missing names fall back to ``HIGH``."""
        if isinstance(value, Tier):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.HIGH


# Orchestration order of the tier stages.
TIER_ORDER: tuple[Tier, ...] = (Tier.HIGH, Tier.MEDIUM, Tier.LOW)

# Per-tier provider timeouts in seconds.
DEFAULT_TIER_TIMEOUTS: dict[Tier, float] = {
    Tier.HIGH: 3.0,
    Tier.MEDIUM: 5.0,
    Tier.LOW: 8.0,
}


@dataclass(frozen=True)
class ProviderDescriptor:
    """One upstream search provider as supplied by the source registry."""

    key: str
    name: str
    tier: Tier = Tier.MEDIUM
    is_adult: bool = False
    api: str = ""


@dataclass(frozen=True)
class ResultRecord:
    """One item returned by one upstream provider. Immutable once produced."""

    id: str
    title: str
    source: str
    source_name: str = ""
    year: str = UNKNOWN_YEAR
    episodes: tuple[str, ...] = ()
    poster: str | None = None
    douban_id: int | None = None

    @property
    def is_movie(self) -> bool:
        return len(self.episodes) == 1

    @property
    def media_type(self) -> str:
        return "movie" if self.is_movie else "tv"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "episodes": list(self.episodes),
            "source": self.source,
            "source_name": self.source_name,
            "poster": self.poster,
            "douban_id": self.douban_id,
        }


@dataclass(frozen=True)
class TierProviders:
    """Providers partitioned by tier."""

    high: tuple[ProviderDescriptor, ...] = ()
    medium: tuple[ProviderDescriptor, ...] = ()
    low: tuple[ProviderDescriptor, ...] = ()

    def for_tier(self, tier: Tier) -> tuple[ProviderDescriptor, ...]:
        return getattr(self, tier.value)

    def counts(self) -> dict[str, int]:
        return {t.value: len(self.for_tier(t)) for t in TIER_ORDER}


@dataclass(frozen=True)
class AggregatedGroup:
    """Records believed to denote the same logical title.

    Display metadata comes from the first member.
    """

    group_key: str
    members: tuple[ResultRecord, ...]

    @property
    def title(self) -> str:
        return self.members[0].title

    @property
    def year(self) -> str:
        return self.members[0].year

    @property
    def media_type(self) -> str:
        return self.members[0].media_type

    @property
    def sources(self) -> list[str]:
        return [m.source for m in self.members]

    def to_dict(self) -> dict[str, object]:
        return {
            "group_key": self.group_key,
            "title": self.title,
            "year": self.year,
            "type": self.media_type,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass(frozen=True)
class SourceCount:
    """Number of records a single provider contributed."""

    key: str
    name: str
    count: int


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one ``get_batch`` call."""

    tier: Tier
    results: tuple[ResultRecord, ...] = ()
    cached: bool = False
    sites_searched: int = 0

    @property
    def total_results(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class ProbeResult:
    """Reachability/latency probe of one provider endpoint."""

    success: bool
    speed_ms: int
    status: int | None = None
    error: str | None = None


@dataclass
class TierOutcome:
    """Records plus per-provider bookkeeping for one tier fan-out."""

    records: list[ResultRecord] = field(default_factory=list)
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        """True when at least one provider answered (even with zero records)."""
        return bool(self.succeeded)


class SearchError(Exception):
    """Base error for search domain/use cases."""


class SourceNotFound(SearchError):
    """No configured provider has the requested key."""


class SourceRegistryError(SearchError):
    """Provider set or user preferences could not be resolved."""


class UpstreamError(SearchError):
    """Network / parsing errors of a single upstream provider."""
