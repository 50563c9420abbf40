"""Upstream source adapters (registry, preferences, query, probe)."""

from .httpx_adapter import HttpxUpstreamAdapter
from .preferences import ConfigUserPreferences
from .probe import SourceProbe
from .registry import ConfigSourceRegistry

__all__ = [
    "ConfigSourceRegistry",
    "ConfigUserPreferences",
    "HttpxUpstreamAdapter",
    "SourceProbe",
]
