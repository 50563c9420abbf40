from .result_cache import ResultCachePort
from .source_registry import SourceRegistryPort
from .tier_executor import TierExecutorPort
from .upstream_query import UpstreamQueryPort
from .user_preferences import UserPreferencesPort

__all__ = [
    "ResultCachePort",
    "SourceRegistryPort",
    "TierExecutorPort",
    "UpstreamQueryPort",
    "UserPreferencesPort",
]
