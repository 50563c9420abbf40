"""Layered configuration: built-in defaults, a YAML file, env vars, CLI flags."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTION_KEYS: frozenset[str] = frozenset({"http", "logging", "cache", "search"})

# A later layer's source list replaces the earlier one; entries are never merged.
_LIST_KEYS: frozenset[str] = frozenset({"sources"})

_TOP_LEVEL_KEYS: tuple[str, ...] = ("app_name", "environment")

# Flat env/CLI names and where they live in the sectioned config.
_FLAT_TO_SECTION: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "cache_ttl_seconds": ("cache", "ttl_seconds"),
    "cache_sweep_interval_seconds": ("cache", "sweep_interval_seconds"),
    "cache_max_entries": ("cache", "max_entries"),
    "short_circuit_min_results": ("search", "short_circuit_min_results"),
    "response_cache_seconds": ("search", "response_cache_seconds"),
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into *base* in place; nested mappings merge key by key."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape ``AppConfig`` validates.

    Sections (``http``, ``logging``, ``cache``, ``search``) pass through,
    ``sources`` is copied as a list and ``users`` as a mapping of identity
    to preferences. Flat keys such as ``cache_ttl_seconds`` (the shape env
    vars and CLI flags arrive in) are moved into their section.
    """
    out: dict[str, Any] = {}

    for section in _SECTION_KEYS:
        block = data.get(section)
        if isinstance(block, Mapping):
            out[section] = dict(block)

    for key in _LIST_KEYS:
        if data.get(key) is not None:
            out[key] = list(data[key])

    users = data.get("users")
    if isinstance(users, Mapping):
        out["users"] = {identity: prefs for identity, prefs in users.items()}

    for key in _TOP_LEVEL_KEYS:
        if key in data:
            out[key] = data[key]

    for flat_key, (section, section_key) in _FLAT_TO_SECTION.items():
        if flat_key in data:
            out.setdefault(section, {})[section_key] = data[flat_key]

    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig`` for a server or CLI run.

    Later layers win: defaults < YAML file < ``MEDIASIFT_*`` env vars
    (a dotenv file counts as env) < CLI overrides. Missing files given
    explicitly raise ``FileNotFoundError``; nothing is written to disk.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        # Variables already in the process environment keep priority.
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = []
    if config_path is not None:
        layers.append(_read_yaml_config(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged = _normalize_layer(deepcopy(DEFAULT_CONFIG))
    for layer in layers:
        _deep_merge(merged, _normalize_layer(layer))

    return AppConfig.model_validate(merged)
