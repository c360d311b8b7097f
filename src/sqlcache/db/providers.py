"""Connection providers.

A provider turns one of the supported connection sources into a single
capability: ``acquire()``, a context manager yielding a live SQLAlchemy
``Connection``. The driver re-acquires a connection for every operation and
never keeps one as a long-lived attribute, so providers are free to hand
back the same handle each time, check one out of a pool, or build a fresh
one.

Supported sources:
- a ``Connection``: the same handle is returned on every call
- an ``Engine``: a pooled connection is checked out per call and returned
  to the pool afterwards
- a zero-argument callable returning a ``Connection``
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Union

from sqlalchemy import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from sqlcache.models.errors import ConfigurationError, DatabaseConnectionError

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], Connection]
ConnectionSource = Union[Connection, Engine, ConnectionFactory, "ConnectionProvider"]


class ConnectionProvider(ABC):
    """Capability that yields a live connection on demand."""

    @abstractmethod
    def acquire(self) -> AbstractContextManager[Connection]:
        """Yield a live connection for the duration of one operation.

        Raises:
            DatabaseConnectionError: If no connection can be produced.
        """

    def describe(self) -> str:
        """Short description used in log messages."""
        return self.__class__.__name__


class ConnectionHandleProvider(ConnectionProvider):
    """Provider that always returns the same connection handle.

    The handle's lifecycle belongs to the caller; it is never closed here.
    """

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    @contextmanager
    def acquire(self) -> Iterator[Connection]:
        if self.connection.closed:
            raise DatabaseConnectionError(
                "Connection handle is closed",
                details={"provider": self.describe()},
            )
        yield self.connection

    def describe(self) -> str:
        return f"connection handle ({self.connection.dialect.name})"


class EngineProvider(ConnectionProvider):
    """Provider that checks a connection out of an engine's pool per call.

    Reconnection, pre-ping and recycling are handled by the engine's pool.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @contextmanager
    def acquire(self) -> Iterator[Connection]:
        try:
            connection = self.engine.connect()
        except SQLAlchemyError as e:
            logger.error(f"Failed to acquire connection from {self.describe()}: {e}")
            raise DatabaseConnectionError(
                f"Failed to acquire connection: {e}",
                details={"provider": self.describe(), "error": str(e)},
            ) from e

        with connection:
            yield connection

    def describe(self) -> str:
        return f"engine {self.engine.url!r}"


class CallableProvider(ConnectionProvider):
    """Provider that calls a zero-argument factory on every acquisition.

    Connections produced by the factory are not closed here; the factory
    decides whether it hands out a shared or a fresh connection.
    """

    def __init__(self, factory: ConnectionFactory) -> None:
        self.factory = factory

    @contextmanager
    def acquire(self) -> Iterator[Connection]:
        try:
            connection = self.factory()
        except Exception as e:
            logger.error(f"Connection factory {self.describe()} failed: {e}")
            raise DatabaseConnectionError(
                f"Failed to acquire connection: {e}",
                details={"provider": self.describe(), "error": str(e)},
            ) from e

        if not isinstance(connection, Connection):
            raise DatabaseConnectionError(
                "Connection factory did not return a Connection",
                details={
                    "provider": self.describe(),
                    "returned_type": type(connection).__name__,
                },
            )
        yield connection

    def describe(self) -> str:
        name = getattr(self.factory, "__qualname__", None) or repr(self.factory)
        return f"factory {name}"


def as_provider(source: ConnectionSource) -> ConnectionProvider:
    """Coerce a connection source into a provider.

    Args:
        source: A ``Connection``, an ``Engine``, a zero-argument callable
            returning a ``Connection``, or an existing provider.

    Returns:
        ConnectionProvider: Provider wrapping the source.

    Raises:
        ConfigurationError: If the source is none of the supported forms.

    Example:
        >>> engine = create_engine("sqlite:///cache.db")
        >>> provider = as_provider(engine)
        >>> with provider.acquire() as conn:
        ...     conn.exec_driver_sql("SELECT 1")
    """
    if isinstance(source, ConnectionProvider):
        return source
    if isinstance(source, Connection):
        return ConnectionHandleProvider(source)
    if isinstance(source, Engine):
        return EngineProvider(source)
    if callable(source):
        return CallableProvider(source)

    raise ConfigurationError(
        "Unsupported connection source",
        details={"source_type": type(source).__name__},
    )
