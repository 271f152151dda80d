# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Structured logger abstraction used by the cleanup job, health check, and reporting helper.

Example:
    >>> from app_errors.logger import create_logger
    >>> logger = create_logger(logger_type="stdout", level="INFO", name="orders-service")
    >>> logger.info("Cleanup finished", resolved_deleted=3)
    >>>
    >>> # Keep log entries in memory for assertions in tests
    >>> test_logger = create_logger(logger_type="silent")
"""

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class Logger(ABC):
    """Abstract base class for loggers.

    Every method takes a message plus arbitrary structured fields.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        """Initialize logger.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            name: Optional logger name for identification

        Raises:
            ValueError: If level is not a known level
        """
        self.level = level.upper()
        self.name = name or "app-errors"

        if self.level not in LEVELS:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(LEVELS.keys())}")

    @abstractmethod
    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        """Emit one log entry."""
        pass

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info-level message."""
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning-level message."""
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message."""
        self._log("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug-level message."""
        self._log("DEBUG", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message from inside an exception handler."""
        kwargs.setdefault("exc_info", True)
        self._log("ERROR", message, **kwargs)


class StdoutLogger(Logger):
    """Logger that writes one JSON object per line to stdout."""

    def __init__(self, level: str = "INFO", name: str | None = None):
        super().__init__(level=level, name=name)

        # Mirror to a stdlib logger so caplog and handlers can capture records
        self._stdlib_logger = logging.getLogger(self.name)
        self._stdlib_logger.setLevel(logging.NOTSET)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        if LEVELS[level] < LEVELS[self.level]:
            return

        exc_info = kwargs.pop("exc_info", None)

        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
        }
        if kwargs:
            log_entry["extra"] = kwargs

        try:
            print(json.dumps(log_entry, default=str), file=sys.stdout, flush=True)
        except (TypeError, ValueError) as e:
            print(f"{level}: {message} (JSON serialization failed: {e})", file=sys.stderr, flush=True)

        extra = {"extra": kwargs} if kwargs else None
        self._stdlib_logger.log(LEVELS[level], message, exc_info=exc_info, extra=extra)


class SilentLogger(Logger):
    """Logger that keeps entries in memory without output.

    Does not filter by level; every entry is kept for test assertions.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        super().__init__(level=level, name=name)
        self.logs: list[dict[str, Any]] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        log_entry: dict[str, Any] = {"level": level, "message": message}
        if kwargs:
            log_entry["extra"] = kwargs
        self.logs.append(log_entry)

    def clear_logs(self) -> None:
        """Clear all stored log messages."""
        self.logs.clear()

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        """Get stored log entries, optionally filtered by level."""
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Return True if a stored message contains ``message`` (substring match)."""
        return any(message in log["message"] for log in self.get_logs(level))


def _default(value: str | None, env_var: str, fallback: str) -> str:
    """Pick an explicit value, then env var, then fallback."""
    return value or os.getenv(env_var) or fallback


def create_logger(
    logger_type: str | None = None,
    level: str | None = None,
    name: str | None = None,
) -> Logger:
    """Factory function to create a logger instance.

    Args:
        logger_type: "stdout" or "silent". Defaults to LOG_TYPE env or "stdout".
        level: DEBUG, INFO, WARNING, or ERROR. Defaults to LOG_LEVEL env or "INFO".
        name: Logger name. Defaults to LOG_NAME env or "app-errors".

    Returns:
        Logger instance

    Raises:
        ValueError: If logger_type is not recognized
    """
    logger_type = _default(logger_type, "LOG_TYPE", "stdout").lower()
    level = _default(level, "LOG_LEVEL", "INFO").upper()
    name = _default(name, "LOG_NAME", "app-errors")

    if logger_type == "stdout":
        return StdoutLogger(level=level, name=name)
    elif logger_type == "silent":
        return SilentLogger(level=level, name=name)
    else:
        raise ValueError(
            f"Unknown logger_type: {logger_type}. "
            f"Must be one of: stdout, silent"
        )
