"""Transaction scoping for cache statements."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Connection


@contextmanager
def transaction_scope(connection: Connection) -> Iterator[Connection]:
    """Run the enclosed statements atomically on ``connection``.

    A new transaction is begun and committed when the connection is idle.
    When the caller already holds an open transaction on a shared handle, a
    savepoint is used instead so a failed statement rolls back only its own
    work and the caller's transaction stays usable. The cache writes then
    commit or roll back together with the caller's transaction.

    On pysqlite, savepoints only nest inside the caller's transaction when
    the engine was prepared with
    :func:`sqlcache.db.pool.enable_sqlite_transactions`; engines built by
    ``create_engine_from_config`` already are.

    Args:
        connection: Connection to scope.

    Yields:
        Connection: The same connection.
    """
    if connection.in_transaction():
        with connection.begin_nested():
            yield connection
    else:
        with connection.begin():
            yield connection
