# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for store backends, cache and history lifetimes,
suggestion debounce tuning, the remote API client and logging.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Durable store ===
    store_backend: Literal["memory", "json", "sqlite", "redis"] = "json"
    store_root: Path = Path("~/.searchcache/store")
    store_redis_url: str = ""
    store_redis_namespace: str = "searchcache:"

    # === Result cache ===
    cache_ttl_minutes: float = 30.0
    cache_key_prefix: str = "@search_cache_"
    cache_sweep_enabled: bool = True
    cache_sweep_interval_minutes: float = 10.0

    # === Recent-search history ===
    history_key: str = "@recent_searches"
    history_max_entries: int = 10
    history_ttl_days: float = 7.0

    # Shared by cache fingerprinting and history dedup
    query_casefold: bool = False

    # === Suggestions / surface behaviour ===
    suggest_debounce_ms: int = 300
    suggest_min_chars: int = 2
    suggest_limit: int = 6
    blur_hide_delay_ms: int = 200

    # === Remote search API ===
    api_base_url: str = "http://localhost:3000/api"
    api_timeout_seconds: float = 15.0
    api_search_path: str = "/search/products"
    api_suggestions_path: str = "/search/suggestions"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator(
        "cache_ttl_minutes",
        "cache_sweep_interval_minutes",
        "history_ttl_days",
        "api_timeout_seconds",
    )
    @classmethod
    def validate_positive_duration(cls, v: float, info) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("suggest_debounce_ms", "blur_hide_delay_ms")
    @classmethod
    def validate_non_negative_delay(cls, v: int, info) -> int:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.history_max_entries < 1:
            errors.append("HISTORY_MAX_ENTRIES must be >= 1")

        if self.suggest_min_chars < 1:
            errors.append("SUGGEST_MIN_CHARS must be >= 1")

        if self.suggest_limit < 1:
            errors.append("SUGGEST_LIMIT must be >= 1")

        if self.history_key.startswith(self.cache_key_prefix):
            errors.append("HISTORY_KEY must not share CACHE_KEY_PREFIX")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.cache_ttl_minutes)

    @property
    def history_ttl(self) -> timedelta:
        return timedelta(days=self.history_ttl_days)

    @property
    def cache_sweep_interval_s(self) -> float:
        return self.cache_sweep_interval_minutes * 60.0

    @property
    def suggest_debounce_s(self) -> float:
        return self.suggest_debounce_ms / 1000.0

    @property
    def blur_hide_delay_s(self) -> float:
        return self.blur_hide_delay_ms / 1000.0


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-surface config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
