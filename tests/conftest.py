"""Pytest configuration and shared fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import Engine

from sqlcache.config.settings import DatabaseConfig, reset_settings
from sqlcache.db.pool import create_engine_from_config

_ENV_PREFIXES = ("DATABASE_", "CACHE_", "OBSERVABILITY_")


@pytest.fixture(autouse=True)
def reset_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset global settings and configuration env vars before each test."""
    for name in list(os.environ):
        if name.upper().startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a SQLite database file in a temporary directory."""
    return f"sqlite:///{tmp_path / 'cache.db'}"


@pytest.fixture
def sqlite_engine(sqlite_url: str) -> Iterator[Engine]:
    """Pooled engine on a temporary SQLite database file."""
    engine = create_engine_from_config(DatabaseConfig(url=sqlite_url))
    yield engine
    engine.dispose()
