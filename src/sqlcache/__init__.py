"""SQL cache driver - key/value cache storage in a database table.

Stores each cache namespace in its own table of an existing SQL database,
using the database's native upsert where available.
"""

__version__ = "0.1.0"

from sqlcache.cache.base import CacheDriver
from sqlcache.cache.dbi import SQLCacheDriver
from sqlcache.config.settings import Settings, get_settings
from sqlcache.db.providers import ConnectionProvider, as_provider
from sqlcache.models.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCode,
    ProvisioningError,
    SQLCacheError,
    StoreError,
    UnsupportedOperationError,
    ValidationError,
)
from sqlcache.models.statements import Dialect, SqlStrings

__all__ = [
    "__version__",
    # Drivers
    "CacheDriver",
    "SQLCacheDriver",
    "ConnectionProvider",
    "as_provider",
    # Config
    "Settings",
    "get_settings",
    # Models
    "Dialect",
    "SqlStrings",
    # Errors
    "SQLCacheError",
    "ConfigurationError",
    "ValidationError",
    "DatabaseError",
    "DatabaseConnectionError",
    "ProvisioningError",
    "StoreError",
    "UnsupportedOperationError",
    "ErrorCode",
]
