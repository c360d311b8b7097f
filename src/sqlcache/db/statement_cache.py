"""Per-connection prepared statement cache.

Statements are kept in ``Connection.info``, a dictionary tied to the
underlying DBAPI connection. A cached statement therefore lives exactly as
long as the physical connection, survives pool check-in and check-out, and
is discarded when the pool recycles or invalidates the connection.
"""

from sqlalchemy import Connection, TextClause, text

from sqlcache.observability.metrics import metrics


class StatementCache:
    """Reuse one compiled statement per SQL text and connection.

    Attributes:
        info_key: Key under which statements are stored in ``Connection.info``.
        record_metrics: Whether lookups are counted in Prometheus metrics.

    Example:
        >>> cache = StatementCache()
        >>> stmt = cache.get(conn, "SELECT 1")
        >>> assert cache.get(conn, "SELECT 1") is stmt
    """

    def __init__(self, info_key: str = "sqlcache.statements", record_metrics: bool = True) -> None:
        self.info_key = info_key
        self.record_metrics = record_metrics

    def get(self, connection: Connection, sql: str) -> TextClause:
        """Return the cached statement for ``sql``, preparing it on first use.

        Args:
            connection: Connection the statement will run on.
            sql: Exact SQL text with named bind parameters.

        Returns:
            TextClause: Statement object reused for identical SQL text.
        """
        statements: dict[str, TextClause] = connection.info.setdefault(self.info_key, {})
        statement = statements.get(sql)
        hit = statement is not None
        if statement is None:
            statement = text(sql)
            statements[sql] = statement

        if self.record_metrics:
            metrics.increment_statement_cache(hit)
        return statement

    def size(self, connection: Connection) -> int:
        """Number of statements cached for ``connection``."""
        return len(connection.info.get(self.info_key, {}))

    def clear(self, connection: Connection) -> None:
        """Drop every statement cached for ``connection``."""
        connection.info.pop(self.info_key, None)
