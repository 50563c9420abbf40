"""Shared test fixtures for the MediaSift test suite."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mediasift.domain.entities import (
    ProviderDescriptor,
    ResultRecord,
    Tier,
    TierProviders,
)

# ---------------------------------------------------------------------------
# Domain entity helpers
# ---------------------------------------------------------------------------


def _make_record(
    title: str = "The Matrix",
    *,
    source: str = "alpha",
    year: str = "1999",
    episodes: tuple[str, ...] = ("https://cdn.example.com/m/index.m3u8",),
    id: str = "1",
    **kwargs: Any,
) -> ResultRecord:
    """Convenience factory for ResultRecord (single episode = movie)."""
    return ResultRecord(
        id=id,
        title=title,
        source=source,
        source_name=kwargs.pop("source_name", source.upper()),
        year=year,
        episodes=episodes,
        **kwargs,
    )


def _make_provider(
    key: str = "alpha",
    tier: Tier = Tier.HIGH,
    *,
    is_adult: bool = False,
    api: str | None = None,
) -> ProviderDescriptor:
    return ProviderDescriptor(
        key=key,
        name=key.upper(),
        tier=tier,
        is_adult=is_adult,
        api=api if api is not None else f"https://{key}.example.com/api.php/provide/vod",
    )


@pytest.fixture()
def record() -> ResultRecord:
    """Minimal valid movie record."""
    return _make_record()


@pytest.fixture()
def providers() -> TierProviders:
    """Two high, one medium, one low provider."""
    return TierProviders(
        high=(_make_provider("alpha"), _make_provider("bravo")),
        medium=(_make_provider("charlie", Tier.MEDIUM),),
        low=(_make_provider("delta", Tier.LOW),),
    )


# ---------------------------------------------------------------------------
# Fake / mock ports
# ---------------------------------------------------------------------------


class FakeUpstream:
    """Scriptable UpstreamQueryPort.

    ``behaviour`` maps provider key to either a list of records, an
    exception instance (raised), or a float (sleep that long, then
    return an empty list). Any other value is returned unchanged, which
    stands in for a malformed payload.
    """

    def __init__(self, behaviour: dict[str, Any] | None = None) -> None:
        self.behaviour = behaviour or {}
        self.calls: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    async def query(
        self, provider: ProviderDescriptor, query: str
    ) -> list[ResultRecord]:
        self.calls.append((provider.key, query))
        action = self.behaviour.get(provider.key, [])
        if isinstance(action, BaseException):
            raise action
        if isinstance(action, (int, float)):
            try:
                await asyncio.sleep(action)
            except asyncio.CancelledError:
                self.cancelled.append(provider.key)
                raise
            return []
        if isinstance(action, list):
            return list(action)
        return action


@pytest.fixture()
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def mock_registry(providers: TierProviders) -> MagicMock:
    """Mock SourceRegistryPort returning the ``providers`` fixture."""
    registry = MagicMock()
    registry.get_providers = AsyncMock(return_value=providers)
    return registry


@pytest.fixture()
def mock_preferences() -> AsyncMock:
    """Mock UserPreferencesPort (filters adult content)."""
    prefs = AsyncMock()
    prefs.get_adult_filter = AsyncMock(return_value=True)
    return prefs
