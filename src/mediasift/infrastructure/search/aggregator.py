"""Group raw records into logical titles and order them for display.

Pure functions: the same input sequence always yields the same groups
in the same order, so re-aggregating a growing result set after every
tier is plain recomputation.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable, Sequence

from mediasift.domain.entities import (
    UNKNOWN_YEAR,
    AggregatedGroup,
    ResultRecord,
    SourceCount,
)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_title(text: str) -> str:
    """Strip all whitespace (leading, trailing and internal)."""
    return _WHITESPACE_RE.sub("", text)


def group_key(record: ResultRecord) -> str:
    """``normalize(title)-year-movie|tv``."""
    year = record.year or UNKNOWN_YEAR
    return f"{normalize_title(record.title)}-{year}-{record.media_type}"


def _compare_years(a: str, b: str) -> int:
    """Higher year first; unknown after any known year."""
    if a == b:
        return 0
    if a == UNKNOWN_YEAR:
        return 1
    if b == UNKNOWN_YEAR:
        return -1
    return -1 if a > b else 1


def _group_comparator(needle: str):
    def compare(a: AggregatedGroup, b: AggregatedGroup) -> int:
        a_match = needle in normalize_title(a.title)
        b_match = needle in normalize_title(b.title)
        if a_match != b_match:
            return -1 if a_match else 1

        by_year = _compare_years(a.year or UNKNOWN_YEAR, b.year or UNKNOWN_YEAR)
        if by_year:
            return by_year

        if a.group_key == b.group_key:
            return 0
        return -1 if a.group_key < b.group_key else 1

    return compare


def aggregate(
    results: Iterable[ResultRecord], query: str
) -> list[AggregatedGroup]:
    """Partition *results* by group key and sort the groups.

    Ordering (total, deterministic):
        1. Groups whose first member title contains the query
           (both whitespace-stripped) come first.
        2. Higher year first; ``unknown`` after known years.
        3. Lexicographic group key.

    Members keep first-seen order.
    """
    buckets: dict[str, list[ResultRecord]] = {}
    for record in results:
        buckets.setdefault(group_key(record), []).append(record)

    groups = [
        AggregatedGroup(group_key=key, members=tuple(members))
        for key, members in buckets.items()
    ]
    needle = normalize_title(query)
    return sorted(groups, key=cmp_to_key(_group_comparator(needle)))


def summarize_sources(results: Iterable[ResultRecord]) -> list[SourceCount]:
    """Count records per provider, most productive first.

    Ties keep first-appearance order; a missing display name falls
    back to the provider key.
    """
    counts: dict[str, list] = {}
    for record in results:
        entry = counts.get(record.source)
        if entry is None:
            counts[record.source] = [record.source_name or record.source, 1]
        else:
            entry[1] += 1

    ranked = sorted(counts.items(), key=lambda kv: kv[1][1], reverse=True)
    return [SourceCount(key=key, name=name, count=n) for key, (name, n) in ranked]


def filter_by_source(
    results: Sequence[ResultRecord], source: str | None
) -> list[ResultRecord]:
    """Keep records of a single provider; ``"all"``/None keeps everything."""
    if not source or source == "all":
        return list(results)
    return [r for r in results if r.source == source]
