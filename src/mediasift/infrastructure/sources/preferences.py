"""User preference store backed by the ``users`` config section."""

from __future__ import annotations

from typing import Mapping

from mediasift.infrastructure.config.schema import UserPreferenceConfig


class ConfigUserPreferences:
    """Unknown identities get the default (filter adult content)."""

    def __init__(self, users: Mapping[str, UserPreferenceConfig]) -> None:
        self._users = dict(users)

    async def get_adult_filter(self, identity: str) -> bool:
        prefs = self._users.get(identity)
        if prefs is None:
            return True
        return prefs.filter_adult_content
