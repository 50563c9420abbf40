from .search import (
    ANONYMOUS_IDENTITY,
    DEFAULT_TIER_TIMEOUTS,
    TIER_ORDER,
    UNKNOWN_YEAR,
    AggregatedGroup,
    BatchResult,
    ProbeResult,
    ProviderDescriptor,
    ResultRecord,
    SearchError,
    SourceCount,
    SourceNotFound,
    SourceRegistryError,
    Tier,
    TierOutcome,
    TierProviders,
    UpstreamError,
)

__all__ = [
    "ANONYMOUS_IDENTITY",
    "DEFAULT_TIER_TIMEOUTS",
    "TIER_ORDER",
    "UNKNOWN_YEAR",
    "AggregatedGroup",
    "BatchResult",
    "ProbeResult",
    "ProviderDescriptor",
    "ResultRecord",
    "SearchError",
    "SourceCount",
    "SourceNotFound",
    "SourceRegistryError",
    "Tier",
    "TierOutcome",
    "TierProviders",
    "UpstreamError",
]
