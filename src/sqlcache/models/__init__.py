"""Data models and exceptions for the SQL cache driver."""

from sqlcache.models.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCode,
    ErrorDetail,
    ProvisioningError,
    SQLCacheError,
    StoreError,
    UnsupportedOperationError,
    ValidationError,
)
from sqlcache.models.statements import CacheTableInfo, Dialect, SqlStrings

__all__ = [
    # Statements
    "CacheTableInfo",
    "Dialect",
    "SqlStrings",
    # Errors
    "ConfigurationError",
    "DatabaseConnectionError",
    "DatabaseError",
    "ErrorCode",
    "ErrorDetail",
    "ProvisioningError",
    "SQLCacheError",
    "StoreError",
    "UnsupportedOperationError",
    "ValidationError",
]
