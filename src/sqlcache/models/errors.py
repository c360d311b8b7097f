"""Custom exceptions and error codes for the SQL cache driver.

This module defines a hierarchy of exceptions for different error scenarios
and error codes for structured error reporting.
"""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the driver."""

    # Caller errors
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_FAILED = "validation_failed"
    NOT_SUPPORTED = "not_supported"

    # Database errors
    INTERNAL_ERROR = "internal_error"
    DATABASE_ERROR = "database_error"
    DATABASE_CONNECTION_ERROR = "database_connection_error"
    PROVISIONING_ERROR = "provisioning_error"
    STORE_ERROR = "store_error"


class ErrorDetail:
    """Structured error detail information."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize error detail.

        Args:
            code: Error code identifier.
            message: Human-readable error message.
            details: Optional additional context.
        """
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Returns:
            dict: Dictionary containing error information.
        """
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"ErrorDetail(code={self.code}, message={self.message!r})"


class SQLCacheError(Exception):
    """Base exception for all SQL cache driver errors.

    All custom exceptions in this package inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize base error.

        Args:
            message: Human-readable error message.
            code: Error code identifier.
            details: Optional additional context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_error_detail(self) -> ErrorDetail:
        """Convert exception to ErrorDetail.

        Returns:
            ErrorDetail: Structured error detail.
        """
        return ErrorDetail(code=self.code, message=self.message, details=self.details)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code}, message={self.message!r})"


class ConfigurationError(SQLCacheError):
    """Exception raised when the driver is constructed with invalid options."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCode.CONFIGURATION_ERROR, details=details)


class ValidationError(SQLCacheError):
    """Exception raised when a cache key fails validation."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Error message describing validation failure.
            details: Optional validation failure details.
        """
        super().__init__(message=message, code=ErrorCode.VALIDATION_FAILED, details=details)


class UnsupportedOperationError(SQLCacheError):
    """Exception raised for operations this backend does not implement.

    Raised instead of returning an empty result so callers cannot mistake
    an unsupported operation for an empty one.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCode.NOT_SUPPORTED, details=details)


class DatabaseError(SQLCacheError):
    """Exception raised for database operation failures."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.DATABASE_ERROR,
    ) -> None:
        """Initialize database error.

        Args:
            message: Error message describing database failure.
            details: Optional database error details.
            code: Specific database error code.
        """
        super().__init__(message=message, code=code, details=details)


class DatabaseConnectionError(DatabaseError):
    """Exception raised when a connection cannot be acquired."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize database connection error.

        Args:
            message: Error message describing connection failure.
            details: Optional connection error details.
        """
        super().__init__(
            message=message, details=details, code=ErrorCode.DATABASE_CONNECTION_ERROR
        )


class ProvisioningError(DatabaseError):
    """Exception raised when the cache table cannot be created."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, details=details, code=ErrorCode.PROVISIONING_ERROR)


class StoreError(DatabaseError):
    """Exception raised when a value cannot be written.

    This includes:
    - A failed native upsert
    - A failed fallback update after an insert collision
    - A generic insert failing for a reason other than a key collision
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, details=details, code=ErrorCode.STORE_ERROR)
