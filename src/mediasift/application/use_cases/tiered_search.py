"""Orchestration of the high -> medium -> low tier stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable

import structlog

from mediasift.domain.entities import (
    TIER_ORDER,
    AggregatedGroup,
    BatchResult,
    ResultRecord,
    SourceCount,
    Tier,
)
from mediasift.infrastructure.search.aggregator import aggregate, summarize_sources

log = structlog.get_logger(__name__)

BatchFetcher = Callable[[str, Tier, "str | None"], Awaitable[BatchResult]]


class StageState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"


@dataclass
class StageReport:
    tier: Tier
    state: StageState = StageState.PENDING
    cached: bool = False
    sites_searched: int = 0
    result_count: int = 0
    error: str | None = None
    skipped: bool = False


@dataclass
class SearchProgress:
    """Snapshot emitted after every completed stage."""

    query: str
    stages: dict[Tier, StageReport]
    results: list[ResultRecord] = field(default_factory=list)
    groups: list[AggregatedGroup] = field(default_factory=list)
    sources: list[SourceCount] = field(default_factory=list)
    short_circuited: bool = False

    @property
    def sites_searched(self) -> int:
        return sum(s.sites_searched for s in self.stages.values())

    @property
    def finished(self) -> bool:
        return all(s.state is StageState.DONE for s in self.stages.values())

    @property
    def current_stage(self) -> Tier | None:
        for tier in TIER_ORDER:
            if self.stages[tier].state is not StageState.DONE:
                return tier
        return None


def _snapshot(progress: SearchProgress) -> SearchProgress:
    return replace(
        progress,
        stages={t: replace(s) for t, s in progress.stages.items()},
        results=list(progress.results),
        groups=list(progress.groups),
        sources=list(progress.sources),
    )


class TieredSearch:
    """Drives the three tier stages strictly in sequence.

    Each stage delegates to ``fetch_batch`` (normally
    :meth:`BatchSearchUseCase.execute`, or an HTTP client hitting the
    batch endpoint). Stage errors are logged and treated as an empty
    batch; they never stop later stages. After each stage the merged
    result set is re-aggregated from scratch.

    Short-circuit: when the high stage is a cache hit with at least
    ``short_circuit_min_results`` merged results, medium and low are
    skipped (marked done). A threshold of 0 disables it.
    """

    def __init__(
        self,
        fetch_batch: BatchFetcher,
        *,
        short_circuit_min_results: int = 20,
    ) -> None:
        self._fetch_batch = fetch_batch
        self._short_circuit_min = short_circuit_min_results

    async def run(
        self, query: str, identity: str | None = None
    ) -> AsyncIterator[SearchProgress]:
        """Yield a progress snapshot after each stage reaches ``done``."""
        progress = SearchProgress(
            query=query,
            stages={tier: StageReport(tier=tier) for tier in TIER_ORDER},
        )

        for tier in TIER_ORDER:
            report = progress.stages[tier]
            if progress.short_circuited:
                report.state = StageState.DONE
                report.skipped = True
                continue

            report.state = StageState.RUNNING
            batch = await self._run_stage(query, tier, identity, report)
            report.state = StageState.DONE

            progress.results.extend(batch.results)
            progress.groups = aggregate(progress.results, query)
            progress.sources = summarize_sources(progress.results)

            if tier is Tier.HIGH and self._should_short_circuit(batch, progress):
                progress.short_circuited = True
                for later in TIER_ORDER[1:]:
                    progress.stages[later].state = StageState.DONE
                    progress.stages[later].skipped = True
                log.info(
                    "tiered_search_short_circuit",
                    query=query,
                    result_count=len(progress.results),
                )

            yield _snapshot(progress)

        log.info(
            "tiered_search_completed",
            query=query,
            result_count=len(progress.results),
            group_count=len(progress.groups),
            sites_searched=progress.sites_searched,
            short_circuited=progress.short_circuited,
        )

    async def collect(
        self, query: str, identity: str | None = None
    ) -> SearchProgress:
        """Run all stages and return the final snapshot."""
        final: SearchProgress | None = None
        async for progress in self.run(query, identity):
            final = progress
        if final is None:
            raise RuntimeError("tiered search yielded no progress")
        return final

    async def _run_stage(
        self,
        query: str,
        tier: Tier,
        identity: str | None,
        report: StageReport,
    ) -> BatchResult:
        try:
            batch = await self._fetch_batch(query, tier, identity)
        except Exception as e:
            log.warning(
                "tiered_search_stage_error",
                tier=tier.value,
                query=query,
                exc_info=True,
            )
            report.error = str(e) or type(e).__name__
            return BatchResult(tier=tier)

        report.cached = batch.cached
        report.sites_searched = batch.sites_searched
        report.result_count = len(batch.results)
        return batch

    def _should_short_circuit(
        self, batch: BatchResult, progress: SearchProgress
    ) -> bool:
        return (
            self._short_circuit_min > 0
            and batch.cached
            and len(progress.results) >= self._short_circuit_min
        )
