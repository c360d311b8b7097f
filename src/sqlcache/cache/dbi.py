"""SQL database table cache driver.

Each namespace is stored in its own table named ``table_prefix + namespace``
with two columns, ``key`` (primary key) and ``value``. A simple primary-key
lookup is fast on most databases, so an existing database can serve as a
shared cache where a dedicated cache server is unavailable or unsuitable.

Writes use the dialect's native upsert where one exists (MySQL, SQLite,
PostgreSQL). Other databases get a plain insert that falls back to an update
when the key already exists.
"""

import logging
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Connection, Engine, TextClause
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from sqlcache.cache.base import CacheDriver, CacheValue
from sqlcache.cache.table import TableProvisioner
from sqlcache.config.settings import Settings, get_settings
from sqlcache.db.dialect import KEY_MAX_LENGTH, build_sql_strings, resolve_dialect
from sqlcache.db.pool import create_engine_from_config, dispose_engines
from sqlcache.db.providers import ConnectionProvider, ConnectionSource, as_provider
from sqlcache.db.statement_cache import StatementCache
from sqlcache.db.transactions import transaction_scope
from sqlcache.models.errors import (
    ConfigurationError,
    DatabaseError,
    SQLCacheError,
    StoreError,
    UnsupportedOperationError,
    ValidationError,
)
from sqlcache.models.statements import CacheTableInfo, Dialect, SqlStrings
from sqlcache.observability.metrics import metrics

logger = logging.getLogger(__name__)


class SQLCacheDriver(CacheDriver):
    """Cache driver persisting one namespace in one database table.

    Construction resolves the dialect, renders the statement set and, when
    ``create_table`` is true, creates the table. Any failure aborts
    construction, so an instance is always ready for use.

    Attributes:
        namespace: Cache namespace; appended to ``table_prefix`` to form the
            table name.
        table_prefix: Table name prefix, empty when the namespace is the
            literal table name.
        dialect: Dialect resolved from the read-write connection.
        sql_strings: Statements rendered for the table and dialect.

    Example:
        >>> engine = create_engine("sqlite:///cache.db")
        >>> cache = SQLCacheDriver(namespace="sessions", connection=engine, create_table=True)
        >>> cache.store("user:1", "payload")
        >>> cache.fetch("user:1")
        'payload'
    """

    def __init__(
        self,
        namespace: str = "Default",
        connection: ConnectionSource | None = None,
        read_only_connection: ConnectionSource | None = None,
        table_prefix: str | None = "chi_",
        create_table: bool = False,
        dialect: Dialect | str | None = None,
        record_metrics: bool = True,
    ) -> None:
        """Initialize the driver.

        Args:
            namespace: Cache namespace.
            connection: Read-write connection source: a ``Connection``, an
                ``Engine``, a zero-argument callable returning a
                ``Connection``, or a ``ConnectionProvider``.
            read_only_connection: Optional source used for fetch and
                get_keys, e.g. a replica.
            table_prefix: Prefix for the table name; ``None`` or ``""`` uses
                the namespace as the literal table name.
            create_table: Create the table if it does not exist.
            dialect: Force a dialect instead of detecting it.
            record_metrics: Record Prometheus metrics for operations.

        Raises:
            ConfigurationError: If the namespace, a connection source or the
                dialect is invalid.
            DatabaseConnectionError: If no connection can be acquired.
            ProvisioningError: If the table cannot be created.
        """
        if not namespace:
            raise ConfigurationError("Namespace must not be empty")
        if connection is None:
            raise ConfigurationError("A read-write connection source is required")

        super().__init__(namespace)
        self.table_prefix = table_prefix or ""
        self.table_info = CacheTableInfo(namespace=namespace, table_prefix=self.table_prefix)
        self.record_metrics = record_metrics

        self._provider: ConnectionProvider = as_provider(connection)
        self._read_only_provider: ConnectionProvider | None = (
            as_provider(read_only_connection) if read_only_connection is not None else None
        )
        self._statements = StatementCache(record_metrics=record_metrics)
        self._owned_engines: list[Engine] = []

        forced_dialect = self._coerce_dialect(dialect)
        with self._provider.acquire() as conn:
            self.dialect: Dialect = forced_dialect or resolve_dialect(conn)
            self.sql_strings: SqlStrings = build_sql_strings(
                conn, self.table_info.table_name, self.dialect
            )
            if create_table:
                TableProvisioner(self.table_info).provision(conn, self.sql_strings)

        logger.info(
            f"SQL cache driver ready for namespace '{namespace}'",
            extra={"table": self.table_name, "dialect": str(self.dialect)},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        namespace: str | None = None,
    ) -> "SQLCacheDriver":
        """Build a driver with pooled engines described by settings.

        The engines are owned by the driver and disposed by ``close()``.

        Args:
            settings: Settings to use; the global settings by default.
            namespace: Override for ``settings.cache.namespace``.

        Returns:
            SQLCacheDriver: Ready driver.
        """
        settings = settings or get_settings()
        engine = create_engine_from_config(settings.database)
        read_only_engine = (
            create_engine_from_config(settings.database, read_only=True)
            if settings.database.read_only_url
            else None
        )

        try:
            driver = cls(
                namespace=namespace or settings.cache.namespace,
                connection=engine,
                read_only_connection=read_only_engine,
                table_prefix=settings.cache.table_prefix,
                create_table=settings.cache.create_table,
                record_metrics=settings.observability.metrics_enabled,
            )
        except Exception:
            dispose_engines(engine, read_only_engine)
            raise

        driver._owned_engines = [e for e in (engine, read_only_engine) if e is not None]
        return driver

    @property
    def table_name(self) -> str:
        """Unquoted name of the backing table."""
        return self.table_info.table_name

    def use_connection(self, source: ConnectionSource | None, read_only: bool = False) -> None:
        """Replace a connection source on a ready driver.

        Useful in long-running processes that validate or reopen a
        connection per request. The dialect and statements are kept.

        Args:
            source: New connection source. ``None`` removes the read-only
                source so reads go to the read-write connection.
            read_only: Replace the read-only source instead of the
                read-write one.

        Raises:
            ConfigurationError: If ``source`` is ``None`` for the read-write
                connection or is not a supported source.
        """
        if read_only:
            self._read_only_provider = as_provider(source) if source is not None else None
            return
        if source is None:
            raise ConfigurationError("A read-write connection source is required")
        self._provider = as_provider(source)

    def fetch(self, key: str) -> CacheValue | None:
        """Return the value stored under ``key``, or None when absent.

        Raises:
            ValidationError: If the key is invalid.
            DatabaseError: If the query fails.
        """
        self._validate_key(key)
        with self._operation("fetch", read_only=True) as conn:
            with transaction_scope(conn):
                row = conn.execute(self._statement(conn, "fetch"), {"key": key}).first()

        value = row[0] if row is not None else None
        if self.record_metrics:
            metrics.increment_fetch_result(value is not None, self.table_name)
        return value

    def fetch_multi(self, keys: Iterable[str]) -> dict[str, CacheValue]:
        """Fetch several keys over one connection.

        Returns:
            dict: Values of the keys that are present.
        """
        keys = list(keys)
        for key in keys:
            self._validate_key(key)

        values: dict[str, CacheValue] = {}
        with self._operation("fetch_multi", read_only=True) as conn:
            statement = self._statement(conn, "fetch")
            with transaction_scope(conn):
                for key in keys:
                    row = conn.execute(statement, {"key": key}).first()
                    if row is not None and row[0] is not None:
                        values[key] = row[0]

        if self.record_metrics:
            for key in keys:
                metrics.increment_fetch_result(key in values, self.table_name)
        return values

    def store(self, key: str, value: CacheValue) -> None:
        """Store ``value`` under ``key``, replacing any existing value.

        Raises:
            ValidationError: If the key is invalid.
            StoreError: If the row cannot be written.
        """
        self._validate_key(key)
        params = {"key": key, "value": value}

        with self._operation("store") as conn:
            try:
                with transaction_scope(conn):
                    conn.execute(self._statement(conn, "store"), params)
            except IntegrityError as e:
                if self.dialect.has_native_upsert:
                    raise self._store_error(key, e) from e
                # Usually a key collision; replace the existing value
                logger.debug(f"Insert of key {key!r} collided, updating {self.table_name}")
                self._store_fallback(conn, params, e)
            except SQLAlchemyError as e:
                raise self._store_error(key, e) from e

    def remove(self, key: str) -> None:
        """Remove ``key``. Removing a missing key is not an error.

        Raises:
            ValidationError: If the key is invalid.
            DatabaseError: If the delete fails.
        """
        self._validate_key(key)
        with self._operation("remove") as conn:
            with transaction_scope(conn):
                conn.execute(self._statement(conn, "remove"), {"key": key})

    def clear(self) -> None:
        """Delete every row of the table. The table itself is kept."""
        with self._operation("clear") as conn:
            with transaction_scope(conn):
                conn.execute(self._statement(conn, "clear"))

    def get_keys(self) -> list[str]:
        """Return every key in the table in no particular order."""
        with self._operation("get_keys", read_only=True) as conn:
            with transaction_scope(conn):
                result = conn.execute(self._statement(conn, "get_keys"))
                return [row[0] for row in result]

    def get_namespaces(self) -> list[str]:
        """Not supported by this backend.

        Raises:
            UnsupportedOperationError: Always.
        """
        raise UnsupportedOperationError(
            "get_namespaces is not supported by the SQL cache driver",
            details={"namespace": self.namespace},
        )

    def close(self) -> None:
        """Dispose engines created by ``from_settings``.

        Connection sources passed in by the caller are left untouched.
        """
        dispose_engines(*self._owned_engines)
        self._owned_engines = []

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(namespace={self.namespace!r}, "
            f"table={self.table_name!r}, dialect={str(self.dialect)!r})"
        )

    @contextmanager
    def _operation(self, operation: str, read_only: bool = False) -> Iterator[Connection]:
        """Acquire a connection for one operation and account for it.

        Database errors raised in the block are wrapped in ``DatabaseError``.
        """
        provider = self._provider
        if read_only and self._read_only_provider is not None:
            provider = self._read_only_provider

        start = time.perf_counter()
        status = "error"
        try:
            with provider.acquire() as conn:
                yield conn
            status = "success"
        except SQLCacheError as e:
            logger.error(f"Cache {operation} on {self.table_name} failed: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Cache {operation} on {self.table_name} failed: {e}")
            raise DatabaseError(
                f"Cache {operation} on {self.table_name} failed: {e}",
                details=self._error_details(operation, e),
            ) from e
        finally:
            if self.record_metrics:
                metrics.increment_operation(operation, status, self.table_name)
                metrics.observe_operation_duration(operation, time.perf_counter() - start)

    def _statement(self, connection: Connection, name: str) -> TextClause:
        return self._statements.get(connection, getattr(self.sql_strings, name))

    def _store_fallback(
        self, connection: Connection, params: dict[str, Any], insert_error: IntegrityError
    ) -> None:
        """Update an existing row after the insert hit a key collision.

        Raises:
            StoreError: If the update fails or matches no row.
        """
        try:
            with transaction_scope(connection):
                result = connection.execute(
                    self._statement(connection, "store_fallback_update"), params
                )
        except SQLAlchemyError as e:
            raise self._store_error(params["key"], e) from e

        if self.record_metrics:
            metrics.increment_store_fallback(self.table_name)
        if result.rowcount == 0:
            # The insert failed for another reason or the row was removed since
            key = params["key"]
            logger.warning(f"Fallback update of key {key!r} in {self.table_name} matched no row")
            raise self._store_error(key, insert_error) from insert_error

    def _store_error(self, key: str, error: SQLAlchemyError) -> StoreError:
        details = self._error_details("store", error)
        details["key"] = key
        return StoreError(f"Failed to store key {key!r} in {self.table_name}: {error}", details=details)

    def _error_details(self, operation: str, error: SQLAlchemyError) -> dict[str, Any]:
        orig = getattr(error, "orig", None)
        return {
            "operation": operation,
            "table": self.table_name,
            "dialect": str(self.dialect) if hasattr(self, "dialect") else None,
            "error": str(orig if orig is not None else error),
        }

    @staticmethod
    def _coerce_dialect(dialect: Dialect | str | None) -> Dialect | None:
        if dialect is None or isinstance(dialect, Dialect):
            return dialect
        try:
            return Dialect(dialect.lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown dialect {dialect!r}",
                details={"supported": [d.value for d in Dialect]},
            ) from e

    @staticmethod
    def _validate_key(key: str) -> None:
        if not isinstance(key, str):
            raise ValidationError(
                "Cache key must be a string", details={"key_type": type(key).__name__}
            )
        if len(key) > KEY_MAX_LENGTH:
            raise ValidationError(
                f"Cache key exceeds {KEY_MAX_LENGTH} characters",
                details={"key_length": len(key), "max_length": KEY_MAX_LENGTH},
            )
