"""SQL dialect detection and cache statement rendering.

The DBMS product name comes from the connection's own dialect metadata and
identifiers are quoted with the connection's own identifier preparer, since
quoting rules differ between databases.
"""

import logging

from sqlalchemy import Connection

from sqlcache.models.statements import Dialect, SqlStrings

logger = logging.getLogger(__name__)

# Maximum key length of the cache table's key column
KEY_MAX_LENGTH = 600

_PRODUCT_DIALECTS: dict[str, Dialect] = {
    "mysql": Dialect.MYSQL,
    "mariadb": Dialect.MYSQL,
    "sqlite": Dialect.SQLITE,
    "postgresql": Dialect.POSTGRESQL,
}


def resolve_dialect(connection: Connection) -> Dialect:
    """Map the connection's DBMS product name to a dialect family.

    Args:
        connection: Live connection to inspect.

    Returns:
        Dialect: The matching dialect, or ``Dialect.GENERIC`` for products
            without a dedicated upsert statement.

    Example:
        >>> with engine.connect() as conn:
        ...     resolve_dialect(conn)
        <Dialect.SQLITE: 'sqlite'>
    """
    product = connection.dialect.name.lower()
    dialect = _PRODUCT_DIALECTS.get(product, Dialect.GENERIC)
    logger.debug(f"Resolved database product '{product}' to dialect '{dialect}'")
    return dialect


def quote_identifier(connection: Connection, name: str) -> str:
    """Quote an identifier using the connection's own quoting rules.

    The identifier is always quoted, even when it is not a reserved word.
    """
    return connection.dialect.identifier_preparer.quote_identifier(name)


def build_sql_strings(connection: Connection, table_name: str, dialect: Dialect) -> SqlStrings:
    """Render the cache statements for one table.

    Args:
        connection: Connection whose identifier preparer quotes the names.
        table_name: Unquoted table name (prefix + namespace).
        dialect: Dialect that decides the store statement.

    Returns:
        SqlStrings: Immutable statement set for the table.
    """
    table = quote_identifier(connection, table_name)
    key = quote_identifier(connection, "key")
    value = quote_identifier(connection, "value")

    insert = f"INSERT INTO {table} ( {key}, {value} ) VALUES ( :key, :value )"
    store_fallback_update: str | None = None

    if dialect is Dialect.MYSQL:
        store = f"{insert} ON DUPLICATE KEY UPDATE {value} = VALUES({value})"
    elif dialect is Dialect.SQLITE:
        store = f"INSERT OR REPLACE INTO {table} ( {key}, {value} ) VALUES ( :key, :value )"
    elif dialect is Dialect.POSTGRESQL:
        store = f"{insert} ON CONFLICT ( {key} ) DO UPDATE SET {value} = EXCLUDED.{value}"
    else:
        store = insert
        store_fallback_update = f"UPDATE {table} SET {value} = :value WHERE {key} = :key"

    return SqlStrings(
        dialect=dialect,
        table=table,
        fetch=f"SELECT {value} FROM {table} WHERE {key} = :key",
        store=store,
        store_fallback_update=store_fallback_update,
        remove=f"DELETE FROM {table} WHERE {key} = :key",
        clear=f"DELETE FROM {table}",
        get_keys=f"SELECT DISTINCT {key} FROM {table}",
        create=(
            f"CREATE TABLE IF NOT EXISTS {table} ("
            f" {key} VARCHAR( {KEY_MAX_LENGTH} ), {value} TEXT,"
            f" PRIMARY KEY ( {key} ) )"
        ),
    )
