"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from serum.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.max_cause_depth
    64
    >>> settings.logging.level
    'WARNING'

    # Or with environment variables:
    # SERUM_MAX_CAUSE_DEPTH=16
    # SERUM_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SERUM_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v


class SerumSettings(BaseSettings):
    """Root settings for serum.

    Loads configuration from environment variables with SERUM_ prefix.

    Example environment variables:
        SERUM_MAX_CAUSE_DEPTH=32
        SERUM_LOG_LEVEL=DEBUG
        SERUM_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="SERUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    max_cause_depth: Annotated[int, Field(ge=1, le=10_000)] = Field(
        default=64,
        description="Longest cause chain walked by standardize, encode and decode",
    )

    # Nested settings (loaded with SERUM_LOG_)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton pattern for settings
@lru_cache(maxsize=1)
def get_settings() -> SerumSettings:
    """Get the global settings instance (cached).

    Returns:
        Cached SerumSettings instance
    """
    return SerumSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
