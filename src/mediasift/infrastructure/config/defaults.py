"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "mediasift",
    "environment": "dev",
    "http": {
        "timeout_seconds": 10.0,
        "follow_redirects": True,
        "user_agent": "MediaSift/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "ttl_seconds": 1800,
        "sweep_interval_seconds": 600,
        "max_entries": 4096,
    },
    "search": {
        "tier_timeouts": {"high": 3.0, "medium": 5.0, "low": 8.0},
        "short_circuit_min_results": 20,
        "response_cache_seconds": 7200,
        "probe_timeout_seconds": 8.0,
    },
    "sources": [],
    "users": {},
}
