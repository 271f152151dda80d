# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Configuration providers and typed configuration for error tracking.

Typed configs are plain dataclasses. ``ErrorTrackingConfig.from_provider``
builds one from any :class:`ConfigProvider`, so services can read
environment variables in production and static dictionaries in tests.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

from .health import MIN_DURATION, TimeWindow, TimeUnit

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class ConfigProvider(ABC):
    """Abstract base class for configuration providers."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        raise NotImplementedError

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a boolean configuration value; unparseable values fall back to ``default``."""
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value

        value_lower = str(value).lower()
        if value_lower in _TRUE_VALUES:
            return True
        if value_lower in _FALSE_VALUES:
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value; unparseable values fall back to ``default``."""
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        try:
            return int(value)
        except (ValueError, TypeError):
            return default


class EnvConfigProvider(ConfigProvider):
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: dict[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)


class StaticConfigProvider(ConfigProvider):
    """Configuration provider with static values (useful for tests)."""

    def __init__(self, config: dict[str, Any] | None = None):
        self._config = config if config is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value


class CleanupStrategy(str, Enum):
    """Which records the cleanup job deletes once they expire."""

    ALL_ERRORS = "ALL_ERRORS"
    RESOLVED_ONLY = "RESOLVED_ONLY"


def _check_min_duration(name: str, value: timedelta) -> None:
    if value < MIN_DURATION:
        raise ValueError(f"{name} must be at least 1 minute, but was {value}")


def _required_int(provider: ConfigProvider, key: str, default: int) -> int:
    """Read an integer, raising when the key is set to something that is not one."""
    value = provider.get(key)
    if value is None:
        return default
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"{key} must be an integer, but was {value!r}") from None


def _required_bool(provider: ConfigProvider, key: str, default: bool) -> bool:
    """Read a boolean, raising when the key is set to something that is not one."""
    value = provider.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value

    value_lower = str(value).strip().lower()
    if value_lower in _TRUE_VALUES:
        return True
    if value_lower in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean, but was {value!r}")


@dataclass
class CleanupConfig:
    """Settings for the expired error cleanup job.

    Attributes:
        cleanup_strategy: Delete only resolved records, or unresolved ones too
        resolved_error_expiration: Age after which resolved records are deleted
        unresolved_error_expiration: Age after which unresolved records are deleted
        cleanup_job_name: Thread name pattern for the job (``%d`` is replaced with a counter)
        initial_job_delay: Delay before the first run
        job_interval: Delay between the end of one run and the start of the next
    """

    cleanup_strategy: CleanupStrategy = CleanupStrategy.ALL_ERRORS
    resolved_error_expiration: timedelta = timedelta(days=14)
    unresolved_error_expiration: timedelta = timedelta(days=60)
    cleanup_job_name: str = "Application-Errors-Cleanup-Job-%d"
    initial_job_delay: timedelta = timedelta(minutes=1)
    job_interval: timedelta = timedelta(days=1)

    def __post_init__(self):
        self.cleanup_strategy = CleanupStrategy(self.cleanup_strategy)
        _check_min_duration("resolved_error_expiration", self.resolved_error_expiration)
        _check_min_duration("unresolved_error_expiration", self.unresolved_error_expiration)
        _check_min_duration("initial_job_delay", self.initial_job_delay)
        _check_min_duration("job_interval", self.job_interval)
        if not self.cleanup_job_name or not self.cleanup_job_name.strip():
            raise ValueError("cleanup_job_name must not be blank")


@dataclass
class ErrorTrackingConfig:
    """Top-level error tracking settings: store selection plus optional health check and cleanup."""

    store_type: str = "inmemory"
    database_url: str | None = None
    add_health_check: bool = True
    time_window: TimeWindow = field(default_factory=TimeWindow)
    add_cleanup_job: bool = True
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)

    @classmethod
    def from_provider(cls, provider: ConfigProvider) -> "ErrorTrackingConfig":
        """Build configuration from a provider, using defaults for missing keys.

        Args:
            provider: Source of configuration values

        Returns:
            ErrorTrackingConfig instance

        Raises:
            ValueError: If a value is present but invalid
        """
        defaults = CleanupConfig()

        def minutes(key: str, default: timedelta) -> timedelta:
            return timedelta(minutes=_required_int(provider, key, int(default.total_seconds() // 60)))

        cleanup = CleanupConfig(
            cleanup_strategy=CleanupStrategy(
                str(provider.get("ERROR_CLEANUP_STRATEGY", defaults.cleanup_strategy.value)).upper()
            ),
            resolved_error_expiration=minutes(
                "ERROR_CLEANUP_RESOLVED_RETENTION_MINUTES", defaults.resolved_error_expiration
            ),
            unresolved_error_expiration=minutes(
                "ERROR_CLEANUP_UNRESOLVED_RETENTION_MINUTES", defaults.unresolved_error_expiration
            ),
            initial_job_delay=minutes("ERROR_CLEANUP_INITIAL_DELAY_MINUTES", defaults.initial_job_delay),
            job_interval=minutes("ERROR_CLEANUP_INTERVAL_MINUTES", defaults.job_interval),
        )

        time_window = TimeWindow(
            amount=_required_int(provider, "ERROR_HEALTH_WINDOW_AMOUNT", TimeWindow.DEFAULT_AMOUNT),
            unit=TimeUnit.from_string(provider.get("ERROR_HEALTH_WINDOW_UNIT", TimeWindow.DEFAULT_UNIT.value)),
        )

        return cls(
            store_type=str(provider.get("ERROR_STORE_TYPE", "inmemory")).lower(),
            database_url=provider.get("ERROR_STORE_DATABASE_URL"),
            add_health_check=_required_bool(provider, "ERROR_HEALTH_CHECK_ENABLED", True),
            time_window=time_window,
            add_cleanup_job=_required_bool(provider, "ERROR_CLEANUP_ENABLED", True),
            cleanup=cleanup,
        )
