"""Data models for SQL dialects and cache statement sets."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Dialect(StrEnum):
    """SQL dialect families that change how the cache writes rows."""

    GENERIC = "generic"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"

    @property
    def has_native_upsert(self) -> bool:
        """Whether the dialect stores with a single upsert statement."""
        return self is not Dialect.GENERIC


class SqlStrings(BaseModel):
    """SQL statements used by one cache table.

    Attributes:
        dialect: Dialect the statements were rendered for.
        table: Quoted table identifier.
        fetch: Select the value of one key.
        store: Insert (or upsert) one row.
        store_fallback_update: Update statement used after an insert
            collision; only set for the generic dialect.
        remove: Delete one key.
        clear: Delete every row.
        get_keys: Select all distinct keys.
        create: Create the table if it does not exist.
    """

    model_config = ConfigDict(frozen=True)

    dialect: Dialect
    table: str
    fetch: str
    store: str
    store_fallback_update: str | None = None
    remove: str
    clear: str
    get_keys: str
    create: str

    def as_dict(self) -> dict[str, str]:
        """Mapping of operation name to SQL text for the statements in use."""
        data = self.model_dump(exclude={"dialect", "table"}, exclude_none=True)
        return {name: str(sql) for name, sql in data.items()}


class CacheTableInfo(BaseModel):
    """Identity of the table backing one namespace."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(..., min_length=1, description="Cache namespace")
    table_prefix: str = Field(default="", description="Prefix prepended to the namespace")

    @property
    def table_name(self) -> str:
        """Unquoted table name."""
        return f"{self.table_prefix}{self.namespace}"
