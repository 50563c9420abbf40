"""Port for per-user content filter preferences."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class UserPreferencesPort(Protocol):
    async def get_adult_filter(self, identity: str) -> bool:
        """Return True when adult providers must be excluded for *identity*."""
        ...
