"""Configuration management for the SQL cache driver.

This module defines all configuration settings using Pydantic for validation
and type safety. Configuration is loaded from environment variables with
sensible defaults.
"""

import re
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_URL_PASSWORD_RE = re.compile(r"(?P<prefix>://[^:/@]+:)[^@]*@")


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(
        default="sqlite:///sqlcache.db", description="SQLAlchemy URL of the read-write database"
    )
    read_only_url: str | None = Field(
        default=None, description="Optional SQLAlchemy URL of a read-only replica"
    )

    # Connection pool settings
    pool_size: int = Field(default=5, ge=1, le=100, description="Pool size")
    max_overflow: int = Field(default=10, ge=0, le=100, description="Connections allowed beyond pool_size")
    pool_timeout: float = Field(
        default=30.0, ge=1.0, le=300.0, description="Pool checkout timeout in seconds"
    )
    pool_recycle: int = Field(
        default=-1, ge=-1, description="Recycle connections after this many seconds (-1 disables)"
    )
    pool_pre_ping: bool = Field(
        default=True, description="Test connections for liveness on checkout"
    )
    echo: bool = Field(default=False, description="Log every SQL statement")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the database URL is not empty."""
        if not v or not v.strip():
            raise ValueError("Database URL must not be empty")
        return v.strip()

    @property
    def safe_url(self) -> str:
        """Database URL with masked password for logging."""
        return mask_url_password(self.url)


class CacheConfig(BaseSettings):
    """Cache table configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    namespace: str = Field(
        default="Default", min_length=1, description="Namespace appended to the table prefix"
    )
    table_prefix: str = Field(
        default="chi_", description="Table name prefix; empty uses the namespace as table name"
    )
    create_table: bool = Field(
        default=False, description="Create the cache table on driver construction"
    )


class ObservabilityConfig(BaseSettings):
    """Observability and monitoring configuration."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_")

    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "text"] = Field(default="text", description="Log format")


class Settings(BaseSettings):
    """Main settings aggregating all config sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Nested configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


def mask_url_password(url: str) -> str:
    """Replace the password component of a database URL with ``***``."""
    return _URL_PASSWORD_RE.sub(r"\g<prefix>***@", url)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance.

    Returns:
        Settings: The global settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset global settings instance. Useful for testing."""
    global _settings
    _settings = None
