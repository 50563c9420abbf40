"""Concurrent per-tier fan-out over upstream providers."""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, Literal

import structlog

from mediasift.domain.entities import (
    DEFAULT_TIER_TIMEOUTS,
    ProviderDescriptor,
    ResultRecord,
    Tier,
    TierOutcome,
)
from mediasift.domain.ports import UpstreamQueryPort

log = structlog.get_logger(__name__)

_Status = Literal["ok", "failed", "timeout"]


def _as_records(payload: object) -> list[ResultRecord]:
    """Accept a list or tuple of records; anything else is a malformed answer."""
    if not isinstance(payload, (list, tuple)):
        raise TypeError(
            f"upstream returned {type(payload).__name__}, expected a list of records"
        )
    return list(payload)


class TierFanoutExecutor:
    """Queries every provider of one tier concurrently.

    Each provider query is raced against the tier timeout with
    :func:`asyncio.wait_for`; the loser is cancelled, so a late
    response can never reach the caller and no timer outlives the
    call. Errors and timeouts are isolated per provider and contribute
    an empty record list. Cancelling the fan-out cancels every
    in-flight provider query.

    Args:
        upstream: Adapter performing one network call per provider.
        tier_timeouts: Timeout (seconds) per tier.
    """

    def __init__(
        self,
        *,
        upstream: UpstreamQueryPort,
        tier_timeouts: dict[Tier, float] | None = None,
    ) -> None:
        self._upstream = upstream
        self._timeouts = dict(DEFAULT_TIER_TIMEOUTS)
        if tier_timeouts:
            self._timeouts.update(tier_timeouts)

    def timeout_for(self, tier: Tier | str | None) -> float:
        """Timeout for *tier*; unknown tiers get the high-tier timeout."""
        return self._timeouts[Tier.parse(tier)]

    async def search_tier(
        self,
        providers: Iterable[ProviderDescriptor],
        query: str,
        timeout: float,
    ) -> list[ResultRecord]:
        """Concatenate all provider records obtained within *timeout*."""
        outcome = await self.run_tier(providers, query, timeout)
        return outcome.records

    async def run_tier(
        self,
        providers: Iterable[ProviderDescriptor],
        query: str,
        timeout: float,
    ) -> TierOutcome:
        """Fan out *query* and report which providers answered.

        Records keep provider-iteration order; there is no ordering
        across providers beyond that.
        """
        provider_list = list(providers)
        outcome = TierOutcome()
        if not provider_list:
            return outcome

        t0 = time.perf_counter()
        settled = await asyncio.gather(
            *(self._query_one(p, query, timeout) for p in provider_list)
        )

        for provider, (status, records) in zip(provider_list, settled):
            if status == "ok":
                outcome.succeeded.append(provider.key)
                outcome.records.extend(records)
            elif status == "timeout":
                outcome.timed_out.append(provider.key)
            else:
                outcome.failed.append(provider.key)

        log.info(
            "tier_fanout_complete",
            query=query,
            providers=len(provider_list),
            succeeded=len(outcome.succeeded),
            failed=len(outcome.failed),
            timed_out=len(outcome.timed_out),
            result_count=len(outcome.records),
            duration_ms=round((time.perf_counter() - t0) * 1000.0, 2),
        )
        return outcome

    async def _query_one(
        self,
        provider: ProviderDescriptor,
        query: str,
        timeout: float,
    ) -> tuple[_Status, list[ResultRecord]]:
        try:
            payload = await asyncio.wait_for(
                self._upstream.query(provider, query),
                timeout=timeout,
            )
            records = _as_records(payload)
        except TimeoutError:
            log.warning(
                "tier_provider_timeout",
                provider=provider.key,
                timeout=timeout,
            )
            return "timeout", []
        except Exception:
            log.warning(
                "tier_provider_error",
                provider=provider.key,
                exc_info=True,
            )
            return "failed", []

        log.debug(
            "tier_provider_done",
            provider=provider.key,
            result_count=len(records),
        )
        return "ok", records
