"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediasift.domain.entities import DEFAULT_TIER_TIMEOUTS, Tier

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class CacheConfig(BaseModel):
    """Result cache configuration (in-process only)."""

    ttl_seconds: int = Field(
        default=1800,
        description="Lifetime of a cached tier batch, measured from creation.",
    )
    sweep_interval_seconds: float = Field(
        default=600.0,
        description="Period of the background sweep removing expired entries.",
    )
    max_entries: int = Field(
        default=4096,
        description="Upper bound on cached batches; least recently used go first.",
    )

    @field_validator("ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache ttl_seconds must be >= 0")
        return v

    @field_validator("sweep_interval_seconds")
    @classmethod
    def _validate_sweep(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("cache sweep_interval_seconds must be > 0")
        return v

    @field_validator("max_entries")
    @classmethod
    def _validate_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache max_entries must be >= 1")
        return v


class SearchConfig(BaseModel):
    """Tier fan-out and orchestration policy."""

    tier_timeouts: dict[Tier, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIER_TIMEOUTS),
        description="Per-provider timeout per tier (seconds).",
    )
    short_circuit_min_results: int = Field(
        default=20,
        description=(
            "Skip medium/low tiers when the high tier was a cache hit "
            "with at least this many results. 0 disables short-circuiting."
        ),
    )
    response_cache_seconds: int = Field(
        default=7200,
        description="Cache-Control max-age for batch responses.",
    )
    probe_timeout_seconds: float = Field(
        default=8.0,
        description="Timeout for the provider speed test.",
    )

    @field_validator("tier_timeouts")
    @classmethod
    def _validate_timeouts(cls, v: dict[Tier, float]) -> dict[Tier, float]:
        for tier, seconds in v.items():
            if seconds <= 0:
                raise ValueError(f"tier timeout for {tier.value!r} must be > 0")
        merged = dict(DEFAULT_TIER_TIMEOUTS)
        merged.update(v)
        return merged

    @field_validator("short_circuit_min_results", "response_cache_seconds")
    @classmethod
    def _validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


class SourceConfig(BaseModel):
    """One upstream provider entry (YAML section: sources[])."""

    key: str
    name: str = ""
    api: str
    tier: Tier = Tier.MEDIUM
    is_adult: bool = False
    disabled: bool = False

    @model_validator(mode="after")
    def _default_name(self) -> "SourceConfig":
        if not self.name:
            self.name = self.key
        return self


class UserPreferenceConfig(BaseModel):
    filter_adult_content: bool = True


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/search/sources/users).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="mediasift", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects log format and error details).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Outer HTTP client timeout; tier timeouts are usually tighter.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="MediaSift/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    sources: list[SourceConfig] = Field(default_factory=list)
    users: dict[str, UserPreferenceConfig] = Field(default_factory=dict)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("sources")
    @classmethod
    def _validate_unique_keys(cls, v: list[SourceConfig]) -> list[SourceConfig]:
        seen: set[str] = set()
        for source in v:
            if source.key in seen:
                raise ValueError(f"duplicate source key: {source.key!r}")
            seen.add(source.key)
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": self.cache.model_dump(),
            "search": self.search.model_dump(mode="json"),
            "sources": [s.model_dump(mode="json") for s in self.sources],
        }


class EnvOverrides(BaseSettings):
    """Flat ``MEDIASIFT_*`` overrides, applied above the YAML file.

    Only scalar knobs are exposed, e.g. ``MEDIASIFT_CACHE_TTL_SECONDS``
    or ``MEDIASIFT_SHORT_CIRCUIT_MIN_RESULTS``. Sources and per-user
    preferences are configured in YAML only.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIASIFT_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_ttl_seconds: Optional[int] = None
    cache_sweep_interval_seconds: Optional[float] = None
    cache_max_entries: Optional[int] = None

    short_circuit_min_results: Optional[int] = None
    response_cache_seconds: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Values that were actually set, keyed by their flat name."""
        return self.model_dump(exclude_none=True)
