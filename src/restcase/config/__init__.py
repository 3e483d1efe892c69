"""Configuration management using pydantic-settings."""

from .settings import (
    CacheSettings,
    HttpSettings,
    LoggingSettings,
    RestcaseSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "CacheSettings",
    "HttpSettings",
    "LoggingSettings",
    "RestcaseSettings",
    "clear_settings_cache",
    "get_settings",
]
