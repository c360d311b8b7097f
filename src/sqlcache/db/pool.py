"""Database engine and connection pool management.

This module provides utilities for creating and disposing SQLAlchemy engines,
each of which owns a connection pool.
"""

import logging
from typing import Any

from sqlalchemy import Connection, Engine, create_engine, event
from sqlalchemy.engine import make_url

from sqlcache.config.settings import DatabaseConfig, mask_url_password

logger = logging.getLogger(__name__)


def create_engine_from_config(config: DatabaseConfig, read_only: bool = False) -> Engine:
    """Create a pooled engine for the configured database.

    Args:
        config: Database configuration containing the URL and pool settings.
        read_only: Build the engine for ``read_only_url`` instead of ``url``.

    Returns:
        Engine: A SQLAlchemy engine with its own connection pool.

    Raises:
        ValueError: If ``read_only`` is requested but no read-only URL is set.

    Example:
        >>> config = DatabaseConfig(url="postgresql+psycopg://cache@localhost/app")
        >>> engine = create_engine_from_config(config)
        >>> with engine.connect() as conn:
        ...     conn.exec_driver_sql("SELECT 1")
    """
    url = config.read_only_url if read_only else config.url
    if url is None:
        raise ValueError("No read-only database URL configured")

    kwargs: dict[str, object] = {
        "echo": config.echo,
        "pool_pre_ping": config.pool_pre_ping,
        "pool_recycle": config.pool_recycle,
    }

    # SQLite uses a single-connection or null pool that rejects sizing options
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    if not is_sqlite:
        kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
        )

    engine = create_engine(url, **kwargs)
    if is_sqlite:
        enable_sqlite_transactions(engine)
    logger.info(
        f"Created {'read-only' if read_only else 'read-write'} engine for "
        f"{mask_url_password(url)}"
    )
    return engine


def enable_sqlite_transactions(engine: Engine) -> Engine:
    """Let SQLAlchemy control transactions on a pysqlite engine.

    The pysqlite driver issues its own BEGIN lazily and commits on
    ``RELEASE SAVEPOINT``, so a savepoint inside a caller's transaction would
    not roll back with it. Disabling the driver's transaction handling and
    emitting BEGIN from SQLAlchemy's ``begin`` event makes savepoints and
    rollbacks behave as on other databases.

    Args:
        engine: Engine using the pysqlite driver.

    Returns:
        Engine: The same engine.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(connection: Connection) -> None:
        connection.exec_driver_sql("BEGIN")

    return engine


def dispose_engines(*engines: Engine | None) -> None:
    """Dispose engines and close their pooled connections.

    Errors are logged and the remaining engines are still disposed.

    Args:
        *engines: Engines to dispose; ``None`` entries are skipped.
    """
    for engine in engines:
        if engine is None:
            continue
        try:
            engine.dispose()
            logger.info(f"Connection pool for '{mask_url_password(str(engine.url))}' disposed")
        except Exception as e:
            logger.error(f"Error disposing engine '{engine.url!r}': {e!s}")
