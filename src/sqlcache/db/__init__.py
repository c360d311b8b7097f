"""Database connection, dialect and statement utilities.

This package provides connection providers, engine creation, dialect
detection and per-connection statement caching.
"""

from sqlcache.db.dialect import KEY_MAX_LENGTH, build_sql_strings, quote_identifier, resolve_dialect
from sqlcache.db.pool import (
    create_engine_from_config,
    dispose_engines,
    enable_sqlite_transactions,
)
from sqlcache.db.providers import (
    CallableProvider,
    ConnectionHandleProvider,
    ConnectionProvider,
    ConnectionSource,
    EngineProvider,
    as_provider,
)
from sqlcache.db.statement_cache import StatementCache
from sqlcache.db.transactions import transaction_scope

__all__ = [
    "KEY_MAX_LENGTH",
    "build_sql_strings",
    "quote_identifier",
    "resolve_dialect",
    "create_engine_from_config",
    "enable_sqlite_transactions",
    "dispose_engines",
    "CallableProvider",
    "ConnectionHandleProvider",
    "ConnectionProvider",
    "ConnectionSource",
    "EngineProvider",
    "as_provider",
    "StatementCache",
    "transaction_scope",
]
