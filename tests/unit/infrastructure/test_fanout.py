"""Unit tests for TierFanoutExecutor."""

from __future__ import annotations

import asyncio
import time

import pytest

from mediasift.domain.entities import (
    ProviderDescriptor,
    ResultRecord,
    Tier,
    UpstreamError,
)
from mediasift.infrastructure.search import TierFanoutExecutor


def _p(key: str) -> ProviderDescriptor:
    return ProviderDescriptor(key=key, name=key.upper(), tier=Tier.HIGH)


def _rec(title: str, source: str) -> ResultRecord:
    return ResultRecord(id=title, title=title, source=source)


class TestTimeouts:
    def test_default_timeouts(self, fake_upstream) -> None:
        ex = TierFanoutExecutor(upstream=fake_upstream)
        assert ex.timeout_for(Tier.HIGH) == 3.0
        assert ex.timeout_for(Tier.MEDIUM) == 5.0
        assert ex.timeout_for(Tier.LOW) == 8.0

    def test_unknown_tier_uses_high_timeout(self, fake_upstream) -> None:
        ex = TierFanoutExecutor(upstream=fake_upstream)
        assert ex.timeout_for("bogus") == 3.0

    def test_overrides(self, fake_upstream) -> None:
        ex = TierFanoutExecutor(
            upstream=fake_upstream, tier_timeouts={Tier.LOW: 12.5}
        )
        assert ex.timeout_for(Tier.LOW) == 12.5
        assert ex.timeout_for(Tier.HIGH) == 3.0


class TestSearchTier:
    async def test_empty_providers_returns_immediately(self, fake_upstream) -> None:
        ex = TierFanoutExecutor(upstream=fake_upstream)
        assert await ex.search_tier([], "alien", 3.0) == []
        assert fake_upstream.calls == []

    async def test_concatenates_in_provider_order(self, fake_upstream) -> None:
        fake_upstream.behaviour = {
            "a": [_rec("A1", "a"), _rec("A2", "a")],
            "b": [_rec("B1", "b")],
        }
        ex = TierFanoutExecutor(upstream=fake_upstream)

        records = await ex.search_tier([_p("a"), _p("b")], "alien", 1.0)

        assert [r.title for r in records] == ["A1", "A2", "B1"]

    async def test_failing_provider_is_isolated(self, fake_upstream) -> None:
        fake_upstream.behaviour = {
            "a": UpstreamError("boom"),
            "b": [_rec("B1", "b")],
        }
        ex = TierFanoutExecutor(upstream=fake_upstream)

        records = await ex.search_tier([_p("a"), _p("b")], "alien", 1.0)

        assert [r.title for r in records] == ["B1"]

    async def test_all_failing_returns_empty(self, fake_upstream) -> None:
        fake_upstream.behaviour = {
            "a": RuntimeError("x"),
            "b": ValueError("y"),
        }
        ex = TierFanoutExecutor(upstream=fake_upstream)
        assert await ex.search_tier([_p("a"), _p("b")], "alien", 1.0) == []

    async def test_queries_every_provider_concurrently(self, fake_upstream) -> None:
        fake_upstream.behaviour = {"a": 0.2, "b": 0.2, "c": 0.2}
        ex = TierFanoutExecutor(upstream=fake_upstream)

        t0 = time.perf_counter()
        await ex.search_tier([_p("a"), _p("b"), _p("c")], "alien", 1.0)
        elapsed = time.perf_counter() - t0

        assert sorted(k for k, _ in fake_upstream.calls) == ["a", "b", "c"]
        assert elapsed < 0.5


class TestTimeoutBound:
    async def test_slow_provider_is_dropped_within_timeout(self, fake_upstream) -> None:
        fake_upstream.behaviour = {"slow": 5.0, "fast": [_rec("F1", "fast")]}
        ex = TierFanoutExecutor(upstream=fake_upstream)

        t0 = time.perf_counter()
        outcome = await ex.run_tier([_p("slow"), _p("fast")], "alien", 0.1)
        elapsed = time.perf_counter() - t0

        assert [r.title for r in outcome.records] == ["F1"]
        assert outcome.timed_out == ["slow"]
        assert outcome.succeeded == ["fast"]
        assert elapsed < 1.0
        # The loser of the race is cancelled, not left running.
        assert fake_upstream.cancelled == ["slow"]


class TestRunTierOutcome:
    async def test_reports_per_provider_status(self, fake_upstream) -> None:
        fake_upstream.behaviour = {
            "ok": [],
            "bad": RuntimeError("down"),
            "slow": 5.0,
        }
        ex = TierFanoutExecutor(upstream=fake_upstream)

        outcome = await ex.run_tier([_p("ok"), _p("bad"), _p("slow")], "alien", 0.05)

        assert outcome.succeeded == ["ok"]
        assert outcome.failed == ["bad"]
        assert outcome.timed_out == ["slow"]
        # One provider answered (with zero records) -> completed.
        assert outcome.completed is True
        assert outcome.records == []

    async def test_not_completed_when_nobody_answered(self, fake_upstream) -> None:
        fake_upstream.behaviour = {"bad": RuntimeError("down"), "slow": 5.0}
        ex = TierFanoutExecutor(upstream=fake_upstream)

        outcome = await ex.run_tier([_p("bad"), _p("slow")], "alien", 0.05)

        assert outcome.completed is False


class TestCancellation:
    async def test_cancelling_fanout_cancels_provider_queries(
        self, fake_upstream
    ) -> None:
        fake_upstream.behaviour = {"a": 5.0, "b": 5.0}
        ex = TierFanoutExecutor(upstream=fake_upstream)

        task = asyncio.create_task(ex.run_tier([_p("a"), _p("b")], "alien", 10.0))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert sorted(fake_upstream.cancelled) == ["a", "b"]


class TestMalformedPayload:
    @pytest.mark.parametrize("payload", [None, {"list": []}, "oops"])
    async def test_non_list_answer_counts_as_failure(
        self, fake_upstream, payload
    ) -> None:
        fake_upstream.behaviour = {"bad": payload, "good": [_rec("G1", "good")]}
        ex = TierFanoutExecutor(upstream=fake_upstream)

        outcome = await ex.run_tier([_p("bad"), _p("good")], "alien", 1.0)

        assert [r.title for r in outcome.records] == ["G1"]
        assert outcome.failed == ["bad"]
        assert outcome.succeeded == ["good"]

    async def test_none_answer_does_not_break_search_tier(self, fake_upstream) -> None:
        fake_upstream.behaviour = {"bad": None, "good": [_rec("G1", "good")]}
        ex = TierFanoutExecutor(upstream=fake_upstream)

        records = await ex.search_tier([_p("bad"), _p("good")], "alien", 1.0)

        assert [r.title for r in records] == ["G1"]
