"""In-process result cache - TTL-bounded batches keyed by request fingerprint."""

from __future__ import annotations

import asyncio
import hashlib
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable, Sequence

import structlog
from cachetools import TTLCache

from mediasift.domain.entities import ANONYMOUS_IDENTITY, ResultRecord, Tier

log = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 10 * 60
DEFAULT_MAX_ENTRIES = 4096


def normalize_query(query: str) -> str:
    return query.strip().lower()


def fingerprint(query: str, tier: Tier | str | None, identity: str | None) -> str:
    """Compute deterministic cache key for a (query, tier, identity) triple."""
    tier_str = tier.value if isinstance(tier, Tier) else (tier or "none")
    raw = f"{normalize_query(query)}\x1f{tier_str}\x1f{identity or ANONYMOUS_IDENTITY}"
    return f"search:{hashlib.sha256(raw.encode()).hexdigest()[:32]}"


@dataclass(frozen=True)
class CacheEntry:
    results: tuple[ResultRecord, ...]
    label: str = ""


class ResultCache:
    """Shared, TTL-bounded lookup table for completed tier batches.

    - Entries live in a ``cachetools.TTLCache``; an entry is valid for
      strictly less than ``ttl_seconds`` after it was stored.
    - Entries are never mutated; a store replaces the whole entry.
    - Expired entries are dropped on a missed lookup, on every store and
      by :meth:`sweep`, which also runs on a fixed interval from a
      background task started with :meth:`start`.
    - ``TTLCache`` is not thread-safe, so a single ``threading.Lock``
      guards it. Lookups, stores and sweeps are linearizable whether
      called from the event loop or from worker threads. No lock is
      held across an ``await``.

    Args:
        ttl_seconds: Entry lifetime measured from creation.
        sweep_interval_seconds: Period of the background sweep task.
        max_entries: Size bound; the least recently used entry goes first.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._store: TTLCache[str, CacheEntry] = TTLCache(
            maxsize=max_entries, ttl=ttl_seconds, timer=clock
        )
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task[None] | None = None

        log.info(
            "result_cache_init",
            ttl=ttl_seconds,
            sweep_interval=sweep_interval_seconds,
            max_entries=max_entries,
        )

    # --- Lifecycle ---
    async def __aenter__(self) -> ResultCache:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def start(self) -> None:
        """Start the periodic sweep task on the running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_forever())

    async def aclose(self) -> None:
        """Stop the sweep task and drop all entries."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        self.clear()
        log.info("result_cache_closed")

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def _sweep_forever(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.sweep_interval_seconds)
                try:
                    self.sweep()
                except Exception:
                    log.error("result_cache_sweep_error", exc_info=True)
        except asyncio.CancelledError:
            log.debug("result_cache_sweeper_cancelled")
            raise

    # --- ResultCachePort implementation ---
    def lookup(
        self, query: str, tier: Tier | None, identity: str | None
    ) -> tuple[ResultRecord, ...] | None:
        key = fingerprint(query, tier, identity)
        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                return entry.results
            # TTLCache hides expired keys but keeps them until expire().
            expired = self._store.expire()
        if any(k == key for k, _ in expired):
            log.debug("result_cache_expired", key=key)
        return None

    def store(
        self,
        query: str,
        results: Sequence[ResultRecord],
        tier: Tier | None,
        identity: str | None,
    ) -> None:
        key = fingerprint(query, tier, identity)
        entry = CacheEntry(
            results=tuple(results),
            label=f"{normalize_query(query)}|{tier.value if tier else 'none'}"
            f"|{identity or ANONYMOUS_IDENTITY}",
        )
        with self._lock:
            self._store[key] = entry
        log.debug("result_cache_stored", key=key, result_count=len(entry.results))
        self.sweep()

    def sweep(self) -> int:
        with self._lock:
            removed = len(self._store.expire())
        if removed:
            log.debug("result_cache_swept", removed=removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> dict[str, object]:
        with self._lock:
            self._store.expire()
            labels = []
            for key in list(self._store):
                entry = self._store.get(key)
                if entry is not None:
                    labels.append(entry.label)
        return {"size": len(labels), "keys": labels}

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
