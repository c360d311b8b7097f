"""Unit tests for connection providers."""

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Connection, Engine, create_engine
from sqlalchemy.exc import OperationalError

from sqlcache.db.providers import (
    CallableProvider,
    ConnectionHandleProvider,
    ConnectionProvider,
    EngineProvider,
    as_provider,
)
from sqlcache.models.errors import ConfigurationError, DatabaseConnectionError, ErrorCode


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine."""
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


class TestAsProvider:
    """Tests for as_provider coercion."""

    def test_connection_becomes_handle_provider(self, engine: Engine) -> None:
        """Test a Connection is wrapped in a handle provider."""
        with engine.connect() as conn:
            provider = as_provider(conn)
            assert isinstance(provider, ConnectionHandleProvider)
            assert provider.connection is conn

    def test_engine_becomes_engine_provider(self, engine: Engine) -> None:
        """Test an Engine is wrapped in an engine provider."""
        provider = as_provider(engine)
        assert isinstance(provider, EngineProvider)
        assert provider.engine is engine

    def test_callable_becomes_callable_provider(self, engine: Engine) -> None:
        """Test a zero-argument callable is wrapped in a callable provider."""
        provider = as_provider(engine.connect)
        assert isinstance(provider, CallableProvider)

    def test_provider_passes_through(self, engine: Engine) -> None:
        """Test an existing provider is returned unchanged."""
        provider = EngineProvider(engine)
        assert as_provider(provider) is provider

    @pytest.mark.parametrize("source", ["sqlite://", 42, object()])
    def test_unsupported_source(self, source: object) -> None:
        """Test unsupported sources raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            as_provider(source)  # type: ignore[arg-type]

        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR
        assert exc_info.value.details["source_type"] == type(source).__name__


class TestConnectionHandleProvider:
    """Tests for ConnectionHandleProvider."""

    def test_returns_same_handle(self, engine: Engine) -> None:
        """Test the same connection is yielded on every acquisition."""
        with engine.connect() as conn:
            provider = ConnectionHandleProvider(conn)
            with provider.acquire() as first:
                pass
            with provider.acquire() as second:
                pass

            assert first is conn
            assert second is conn
            assert not conn.closed

    def test_closed_handle_raises(self, engine: Engine) -> None:
        """Test a closed handle surfaces as a connection error."""
        conn = engine.connect()
        conn.close()
        provider = ConnectionHandleProvider(conn)

        with pytest.raises(DatabaseConnectionError, match="closed"):
            with provider.acquire():
                pass


class TestEngineProvider:
    """Tests for EngineProvider."""

    def test_checks_out_and_returns_connection(self, engine: Engine) -> None:
        """Test a pooled connection is closed (returned) after use."""
        provider = EngineProvider(engine)

        with provider.acquire() as conn:
            assert isinstance(conn, Connection)
            assert conn.exec_driver_sql("SELECT 1").scalar() == 1

        assert conn.closed

    def test_connect_failure_wrapped(self) -> None:
        """Test pool checkout failures raise DatabaseConnectionError."""
        engine = MagicMock(spec=Engine)
        engine.url = "postgresql://cache@db/app"
        engine.connect.side_effect = OperationalError("connect", {}, Exception("refused"))
        provider = EngineProvider(engine)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            with provider.acquire():
                pass

        assert exc_info.value.code == ErrorCode.DATABASE_CONNECTION_ERROR
        assert "refused" in exc_info.value.details["error"]
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestCallableProvider:
    """Tests for CallableProvider."""

    def test_factory_called_per_acquisition(self, engine: Engine) -> None:
        """Test the factory is invoked on every acquisition."""
        with engine.connect() as conn:
            factory = MagicMock(return_value=conn)
            provider = CallableProvider(factory)

            for _ in range(3):
                with provider.acquire() as acquired:
                    assert acquired is conn

            assert factory.call_count == 3
            assert not conn.closed

    def test_factory_exception_wrapped(self) -> None:
        """Test factory failures raise DatabaseConnectionError."""
        factory = MagicMock(side_effect=RuntimeError("pool exhausted"))
        provider = CallableProvider(factory)

        with pytest.raises(DatabaseConnectionError, match="pool exhausted"):
            with provider.acquire():
                pass

    def test_factory_wrong_type(self) -> None:
        """Test a factory returning a non-connection is rejected."""
        provider = CallableProvider(lambda: "not a connection")

        with pytest.raises(DatabaseConnectionError) as exc_info:
            with provider.acquire():
                pass

        assert exc_info.value.details["returned_type"] == "str"


def test_providers_share_interface(engine: Engine) -> None:
    """Test every adapter implements ConnectionProvider."""
    with engine.connect() as conn:
        providers = [as_provider(conn), as_provider(engine), as_provider(engine.connect)]
        assert all(isinstance(p, ConnectionProvider) for p in providers)
        assert all(p.describe() for p in providers)
