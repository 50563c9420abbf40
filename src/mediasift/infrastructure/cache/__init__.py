"""Cache infrastructure."""

from .result_cache import CacheEntry, ResultCache, fingerprint, normalize_query

__all__ = [
    "CacheEntry",
    "ResultCache",
    "fingerprint",
    "normalize_query",
]
