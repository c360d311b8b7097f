"""Configuration management module."""

from sqlcache.config.settings import (
    CacheConfig,
    DatabaseConfig,
    ObservabilityConfig,
    Settings,
    get_settings,
    mask_url_password,
    reset_settings,
)

__all__ = [
    "CacheConfig",
    "DatabaseConfig",
    "ObservabilityConfig",
    "Settings",
    "get_settings",
    "mask_url_password",
    "reset_settings",
]
