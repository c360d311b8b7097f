"""Cache table provisioning."""

import logging

from sqlalchemy import Connection, text
from sqlalchemy.exc import SQLAlchemyError

from sqlcache.db.transactions import transaction_scope
from sqlcache.models.errors import ProvisioningError
from sqlcache.models.statements import CacheTableInfo, SqlStrings

logger = logging.getLogger(__name__)


def table_name(namespace: str, table_prefix: str | None = "chi_") -> str:
    """Build the unquoted table name for a namespace.

    An empty or ``None`` prefix uses the namespace as the literal table name.
    """
    return CacheTableInfo(namespace=namespace, table_prefix=table_prefix or "").table_name


class TableProvisioner:
    """Creates the table backing one cache namespace.

    The create statement is ``CREATE TABLE IF NOT EXISTS`` so provisioning
    an existing table is a no-op.

    Example:
        >>> provisioner = TableProvisioner(CacheTableInfo(namespace="sessions", table_prefix="chi_"))
        >>> with engine.connect() as conn:
        ...     provisioner.provision(conn, sql_strings)
    """

    def __init__(self, table: CacheTableInfo) -> None:
        self.table = table

    def provision(self, connection: Connection, sql_strings: SqlStrings) -> None:
        """Create the cache table if it does not exist.

        Args:
            connection: Read-write connection.
            sql_strings: Statement set holding the create statement.

        Raises:
            ProvisioningError: If the create statement fails.
        """
        try:
            with transaction_scope(connection):
                connection.execute(text(sql_strings.create))
        except SQLAlchemyError as e:
            logger.error(f"Failed to create cache table {sql_strings.table}: {e}")
            raise ProvisioningError(
                f"Failed to create cache table {sql_strings.table}: {e}",
                details={
                    "table": self.table.table_name,
                    "namespace": self.table.namespace,
                    "error": str(e),
                },
            ) from e

        logger.info(
            f"Cache table {sql_strings.table} is ready",
            extra={"namespace": self.table.namespace, "dialect": str(sql_strings.dialect)},
        )
