"""Unit tests for cache table provisioning."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import Engine, inspect
from sqlalchemy.dialects import sqlite
from sqlalchemy.exc import OperationalError

from sqlcache.cache.table import TableProvisioner, table_name
from sqlcache.db.dialect import build_sql_strings
from sqlcache.models.errors import ErrorCode, ProvisioningError
from sqlcache.models.statements import CacheTableInfo, Dialect


class TestTableName:
    """Tests for table_name."""

    def test_default_prefix(self) -> None:
        """Test the default prefix gives chi_<namespace>."""
        assert table_name("Default") == "chi_Default"

    def test_custom_prefix(self) -> None:
        """Test a custom prefix is prepended."""
        assert table_name("sessions", "cache_") == "cache_sessions"

    @pytest.mark.parametrize("prefix", [None, ""])
    def test_no_prefix(self, prefix: str | None) -> None:
        """Test the namespace is the literal table name without a prefix."""
        assert table_name("sessions", prefix) == "sessions"


class TestTableProvisioner:
    """Tests for TableProvisioner."""

    @pytest.fixture
    def table(self) -> CacheTableInfo:
        """Table identity for the sessions namespace."""
        return CacheTableInfo(namespace="sessions", table_prefix="chi_")

    def test_provision_creates_table(self, sqlite_engine: Engine, table: CacheTableInfo) -> None:
        """Test the table is created with key and value columns."""
        with sqlite_engine.connect() as conn:
            strings = build_sql_strings(conn, table.table_name, Dialect.SQLITE)
            TableProvisioner(table).provision(conn, strings)
            assert not conn.in_transaction()

        inspector = inspect(sqlite_engine)
        assert inspector.has_table("chi_sessions")
        columns = [col["name"] for col in inspector.get_columns("chi_sessions")]
        assert columns == ["key", "value"]
        assert inspector.get_pk_constraint("chi_sessions")["constrained_columns"] == ["key"]

    def test_provision_is_idempotent(self, sqlite_engine: Engine, table: CacheTableInfo) -> None:
        """Test provisioning an existing table does not fail."""
        provisioner = TableProvisioner(table)
        with sqlite_engine.connect() as conn:
            strings = build_sql_strings(conn, table.table_name, Dialect.SQLITE)
            provisioner.provision(conn, strings)
            provisioner.provision(conn, strings)

        assert inspect(sqlite_engine).has_table("chi_sessions")

    def test_failure_raises_provisioning_error(self, table: CacheTableInfo) -> None:
        """Test create failures abort with ProvisioningError."""
        conn = MagicMock()
        conn.dialect = sqlite.dialect()
        conn.in_transaction.return_value = False
        conn.execute.side_effect = OperationalError("CREATE", {}, Exception("read-only database"))
        strings = build_sql_strings(conn, table.table_name, Dialect.SQLITE)

        with pytest.raises(ProvisioningError) as exc_info:
            TableProvisioner(table).provision(conn, strings)

        err = exc_info.value
        assert err.code == ErrorCode.PROVISIONING_ERROR
        assert err.details["table"] == "chi_sessions"
        assert err.details["namespace"] == "sessions"
        assert "read-only database" in err.details["error"]
        conn.begin.assert_called_once()
