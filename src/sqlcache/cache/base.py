"""Storage driver contract used by the cache front end.

A driver persists opaque payloads under string keys inside one namespace.
Serialization, expiry and namespace policy stay with the caller; a driver
stores and returns values verbatim.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

CacheValue = str | bytes


class CacheDriver(ABC):
    """Abstract base class for namespace-scoped cache storage.

    Attributes:
        namespace: Logical cache partition served by this driver.
    """

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace

    @abstractmethod
    def fetch(self, key: str) -> CacheValue | None:
        """Return the value stored under ``key``, or None when absent."""

    @abstractmethod
    def store(self, key: str, value: CacheValue) -> None:
        """Store ``value`` under ``key``, replacing any existing value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key``; removing a missing key is not an error."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key in the namespace."""

    @abstractmethod
    def get_keys(self) -> list[str]:
        """Return all keys in the namespace in no particular order."""

    @abstractmethod
    def get_namespaces(self) -> list[str]:
        """Return every namespace known to the backend."""

    def fetch_multi(self, keys: Iterable[str]) -> dict[str, CacheValue]:
        """Fetch several keys; absent keys are left out of the result."""
        values: dict[str, CacheValue] = {}
        for key in keys:
            value = self.fetch(key)
            if value is not None:
                values[key] = value
        return values

    def store_multi(self, items: Mapping[str, CacheValue]) -> None:
        """Store every key/value pair of ``items``."""
        for key, value in items.items():
            self.store(key, value)
