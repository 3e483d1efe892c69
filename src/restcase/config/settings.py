"""Environment-based configuration using pydantic-settings.

Example:
    >>> from restcase.config import get_settings
    >>> settings = get_settings()
    >>> settings.cache.ttl
    300.0

    # Or with environment variables:
    # RESTCASE_HTTP_BASE_URL=https://api.example.com
    # RESTCASE_CACHE_ENABLED=false
    # RESTCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpSettings(BaseSettings):
    """Defaults for the httpx transport."""

    model_config = SettingsConfigDict(
        env_prefix="RESTCASE_HTTP_",
        extra="ignore",
    )

    base_url: str = Field(default="", description="Prefix for relative resource urls")
    timeout: PositiveFloat = Field(default=30.0, description="Default request timeout")
    verify_ssl: bool = True
    follow_redirects: bool = True
    max_redirects: PositiveInt = Field(default=10)
    user_agent: str = "restcase/1.0"
    default_headers: dict[str, str] = Field(
        default_factory=lambda: {"Accept": "application/json, text/plain, */*"},
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


class CacheSettings(BaseSettings):
    """Entity cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RESTCASE_CACHE_",
        extra="ignore",
    )

    enabled: bool = True
    ttl: PositiveFloat = Field(default=300.0, description="Snapshot TTL in seconds")
    max_entries: PositiveInt = Field(default=1000, description="Max snapshots per namespace")
    id_field: str = Field(default="id", description="Snapshot field holding the entity id")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RESTCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RestcaseSettings(BaseSettings):
    """Root settings, loaded from ``RESTCASE_``-prefixed environment variables.

    Example environment variables:
        RESTCASE_DEBUG=true
        RESTCASE_HTTP_TIMEOUT=10
        RESTCASE_CACHE_TTL=60
        RESTCASE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RESTCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug logging")

    http: HttpSettings = Field(default_factory=HttpSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RestcaseSettings:
    """Get the global settings instance (cached)."""
    return RestcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
