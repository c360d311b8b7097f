"""Structured logging configuration for the SQL cache driver.

This module provides JSON-formatted structured logging with automatic
sanitization of sensitive data (passwords in keys and database URLs).
"""

import json
import logging
import sys
from typing import Any, ClassVar

from sqlcache.config.settings import Settings, get_settings, mask_url_password

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class SensitiveDataFilter(logging.Filter):
    """Filter to sanitize sensitive data from log records.

    Keys that look like credentials are replaced with a redaction marker
    and passwords embedded in database URLs are masked.

    Example:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(SensitiveDataFilter())
    """

    SENSITIVE_KEYS: ClassVar[set[str]] = {
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "access_token",
        "private_key",
        "authorization",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and sanitize the log record.

        Args:
            record: The log record to filter.

        Returns:
            bool: Always True to allow the record through (after sanitization).
        """
        if record.args:
            record.args = self._sanitize_data(record.args)

        if isinstance(record.msg, str):
            record.msg = mask_url_password(record.msg)

        for key in list(record.__dict__.keys()):
            if key in _STANDARD_ATTRS:
                continue
            if key.lower() in self.SENSITIVE_KEYS:
                record.__dict__[key] = "***REDACTED***"
            else:
                record.__dict__[key] = self._sanitize_data(record.__dict__[key])

        return True

    def _sanitize_data(self, data: Any) -> Any:
        """Recursively sanitize data structures.

        Args:
            data: Data to sanitize (dict, list, tuple, or primitive).

        Returns:
            Sanitized copy of the data.
        """
        if isinstance(data, dict):
            return self._sanitize_dict(data)
        elif isinstance(data, (list, tuple)):
            return type(data)(self._sanitize_data(item) for item in data)
        elif isinstance(data, str):
            return mask_url_password(data)
        return data

    def _sanitize_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(key, str) and key.lower() in self.SENSITIVE_KEYS:
                sanitized[key] = "***REDACTED***"
            else:
                sanitized[key] = self._sanitize_data(value)
        return sanitized


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Example:
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(JSONFormatter())
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        # Base format: timestamp [level] logger - message
        formatted = (
            f"{self.formatTime(record, self.datefmt)} "
            f"[{record.levelname}] "
            f"{record.name} - "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
    enable_sensitive_filter: bool = True,
) -> None:
    """Configure logging with structured output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format type ("json" or "text").
        enable_sensitive_filter: Whether to enable sensitive data filtering.

    Example:
        >>> configure_logging(level="DEBUG", log_format="json")
        >>> logger = logging.getLogger(__name__)
        >>> logger.info("Cache ready", extra={"table": "chi_Default"})
    """
    # Remove existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = TextFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    if enable_sensitive_filter:
        handler.addFilter(SensitiveDataFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # Reduce noise from SQLAlchemy unless echo is requested per engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from the observability settings section.

    Args:
        settings: Settings to use; the global settings by default.
    """
    config = (settings or get_settings()).observability
    configure_logging(level=config.log_level, log_format=config.log_format)
