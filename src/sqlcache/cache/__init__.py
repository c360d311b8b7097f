"""Cache storage drivers.

This package provides the storage driver contract and the SQL table driver
that implements it.
"""

from sqlcache.cache.base import CacheDriver, CacheValue
from sqlcache.cache.dbi import SQLCacheDriver
from sqlcache.cache.table import TableProvisioner, table_name

__all__ = [
    "CacheDriver",
    "CacheValue",
    "SQLCacheDriver",
    "TableProvisioner",
    "table_name",
]
