"""Unit tests for data models.

Tests for statement, table and error models to ensure correct validation
and behavior.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

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


def make_sql_strings(**overrides: str | None) -> SqlStrings:
    """Build a statement set with placeholder SQL."""
    values = {
        "dialect": Dialect.GENERIC,
        "table": '"chi_t"',
        "fetch": "SELECT 1",
        "store": "INSERT 1",
        "store_fallback_update": "UPDATE 1",
        "remove": "DELETE 1",
        "clear": "DELETE ALL",
        "get_keys": "SELECT KEYS",
        "create": "CREATE 1",
    }
    values.update(overrides)
    return SqlStrings(**values)


class TestDialect:
    """Tests for Dialect enum."""

    def test_values(self) -> None:
        """Test dialect string values."""
        assert Dialect("generic") is Dialect.GENERIC
        assert Dialect("mysql") is Dialect.MYSQL
        assert Dialect("sqlite") is Dialect.SQLITE
        assert Dialect("postgresql") is Dialect.POSTGRESQL

    @pytest.mark.parametrize(
        ("dialect", "expected"),
        [
            (Dialect.GENERIC, False),
            (Dialect.MYSQL, True),
            (Dialect.SQLITE, True),
            (Dialect.POSTGRESQL, True),
        ],
    )
    def test_has_native_upsert(self, dialect: Dialect, expected: bool) -> None:
        """Only the generic dialect lacks a single-statement upsert."""
        assert dialect.has_native_upsert is expected


class TestSqlStrings:
    """Tests for SqlStrings model."""

    def test_frozen(self) -> None:
        """Test statement sets cannot be modified after construction."""
        strings = make_sql_strings()
        with pytest.raises(PydanticValidationError):
            strings.fetch = "SELECT 2"  # type: ignore[misc]

    def test_as_dict_includes_fallback_for_generic(self) -> None:
        """Test operation mapping of a generic statement set."""
        mapping = make_sql_strings().as_dict()
        assert set(mapping) == {
            "fetch",
            "store",
            "store_fallback_update",
            "remove",
            "clear",
            "get_keys",
            "create",
        }
        assert mapping["store_fallback_update"] == "UPDATE 1"

    def test_as_dict_omits_unused_fallback(self) -> None:
        """Test native upsert sets do not expose a fallback statement."""
        mapping = make_sql_strings(dialect=Dialect.SQLITE, store_fallback_update=None).as_dict()
        assert "store_fallback_update" not in mapping
        assert "dialect" not in mapping
        assert "table" not in mapping


class TestCacheTableInfo:
    """Tests for CacheTableInfo model."""

    def test_table_name_with_prefix(self) -> None:
        """Test prefix and namespace are concatenated."""
        info = CacheTableInfo(namespace="sessions", table_prefix="chi_")
        assert info.table_name == "chi_sessions"

    def test_table_name_without_prefix(self) -> None:
        """Test namespace is used as literal table name without a prefix."""
        info = CacheTableInfo(namespace="sessions")
        assert info.table_name == "sessions"

    def test_empty_namespace_rejected(self) -> None:
        """Test empty namespace fails validation."""
        with pytest.raises(PydanticValidationError):
            CacheTableInfo(namespace="")


class TestErrorModels:
    """Tests for error models."""

    def test_error_detail_to_dict(self) -> None:
        """Test ErrorDetail serialization."""
        detail = ErrorDetail(
            code=ErrorCode.DATABASE_ERROR,
            message="Connection failed",
        )
        d = detail.to_dict()
        assert d["code"] == ErrorCode.DATABASE_ERROR
        assert d["message"] == "Connection failed"
        assert "details" not in d

    def test_base_exception(self) -> None:
        """Test SQLCacheError base exception."""
        err = SQLCacheError(message="Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.code == ErrorCode.INTERNAL_ERROR
        assert err.details == {}

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (ConfigurationError, ErrorCode.CONFIGURATION_ERROR),
            (ValidationError, ErrorCode.VALIDATION_FAILED),
            (UnsupportedOperationError, ErrorCode.NOT_SUPPORTED),
            (DatabaseError, ErrorCode.DATABASE_ERROR),
            (DatabaseConnectionError, ErrorCode.DATABASE_CONNECTION_ERROR),
            (ProvisioningError, ErrorCode.PROVISIONING_ERROR),
            (StoreError, ErrorCode.STORE_ERROR),
        ],
    )
    def test_error_codes(self, error_class: type[SQLCacheError], code: ErrorCode) -> None:
        """Test each exception carries its error code."""
        err = error_class("failed")
        assert err.code == code
        assert isinstance(err, SQLCacheError)

    def test_database_errors_share_base(self) -> None:
        """Test connection, provisioning and store errors are database errors."""
        for error_class in (DatabaseConnectionError, ProvisioningError, StoreError):
            assert issubclass(error_class, DatabaseError)

    def test_error_to_detail(self) -> None:
        """Test exception to ErrorDetail conversion."""
        err = StoreError(
            message="Failed to store",
            details={"table": "chi_Default", "error": "disk full"},
        )
        detail = err.to_error_detail()
        assert detail.code == ErrorCode.STORE_ERROR
        assert detail.message == "Failed to store"
        assert detail.details["error"] == "disk full"

    def test_repr(self) -> None:
        """Test exception representation."""
        err = UnsupportedOperationError("not supported")
        assert repr(err) == (
            "UnsupportedOperationError(code=not_supported, message='not supported')"
        )
