"""Tier fan-out and result aggregation."""

from .aggregator import (
    aggregate,
    filter_by_source,
    group_key,
    normalize_title,
    summarize_sources,
)
from .fanout import TierFanoutExecutor

__all__ = [
    "TierFanoutExecutor",
    "aggregate",
    "filter_by_source",
    "group_key",
    "normalize_title",
    "summarize_sources",
]
