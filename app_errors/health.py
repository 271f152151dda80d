# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Health check reporting unhealthy while recent unresolved errors exist."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, ClassVar

from .error_store import ErrorStore
from .exceptions import InvalidArgumentError
from .logger import Logger
from .models import HostIdentity
from .paging import utc_now

MIN_DURATION = timedelta(minutes=1)


class TimeUnit(str, Enum):
    """Units accepted for the health check time window."""

    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"

    @classmethod
    def from_string(cls, value: str) -> "TimeUnit":
        try:
            return cls[str(value).strip().upper()]
        except KeyError as e:
            raise InvalidArgumentError(f"Unknown time unit: {value}") from e


_UNIT_SECONDS = {
    TimeUnit.SECONDS: 1,
    TimeUnit.MINUTES: 60,
    TimeUnit.HOURS: 3600,
    TimeUnit.DAYS: 86400,
}


def _plural(amount: int, word: str) -> str:
    return f"{amount} {word}" if amount == 1 else f"{amount} {word}s"


def humanize_duration(duration: timedelta) -> str:
    """Render a duration in words, e.g. ``1 hour 30 minutes``; zero parts are omitted."""
    remaining = int(duration.total_seconds())
    parts = []
    for word, size in (("day", 86400), ("hour", 3600), ("minute", 60), ("second", 1)):
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(_plural(amount, word))
    return " ".join(parts) or "0 seconds"


@dataclass(frozen=True)
class TimeWindow:
    """Sliding window over which recent errors are counted."""

    DEFAULT_AMOUNT: ClassVar[int] = 15
    DEFAULT_UNIT: ClassVar[TimeUnit] = TimeUnit.MINUTES

    amount: int = DEFAULT_AMOUNT
    unit: TimeUnit = DEFAULT_UNIT

    def __post_init__(self):
        if self.amount <= 0:
            raise InvalidArgumentError(f"time window amount must be positive, but was {self.amount}")
        object.__setattr__(self, "unit", TimeUnit(self.unit))
        if self.to_timedelta() < MIN_DURATION:
            raise InvalidArgumentError(f"time window must be at least 1 minute, but was {self.human_readable()}")

    def to_timedelta(self) -> timedelta:
        return timedelta(seconds=self.amount * _UNIT_SECONDS[self.unit])

    def human_readable(self) -> str:
        return humanize_duration(self.to_timedelta())


@dataclass
class HealthCheckResult:
    """Outcome of one health check run."""

    healthy: bool
    message: str
    error_count: int | None = None
    error: BaseException | None = None


class RecentErrorsHealthCheck:
    """Reports unhealthy when any unresolved error was created or updated within the time window.

    With a host identity, only errors from that host count; otherwise all
    unresolved errors in the store do. The check only reads from the store.
    """

    QUERY_FAILED_MESSAGE = "Error executing recent error count database query"

    def __init__(
        self,
        store: ErrorStore,
        host: HostIdentity | None = None,
        time_window: TimeWindow | None = None,
        clock: Callable[[], datetime] = utc_now,
        logger: Logger | None = None,
    ):
        """Initialize the health check.

        Args:
            store: Error store to query
            host: Identity of this service instance; None counts errors from every host
            time_window: Window to look back over (default 15 minutes)
            clock: Returns the current UTC time
            logger: Logger instance
        """
        self.store = store
        self.host = host
        self.time_window = time_window or TimeWindow()
        self.clock = clock
        self.logger = logger

        window = self.time_window.human_readable()
        if host is not None:
            self._message_suffix = (
                f" error(s) created or updated in last {window}"
                f" on host {host.host_name} ({host.ip_address}:{host.port})"
            )
        else:
            self._message_suffix = f" error(s) created or updated in last {window}"

        if self.logger:
            self.logger.debug("Recent errors health check configured", time_window=window)

    def _count_since(self, since: datetime) -> int:
        if self.host is None:
            return self.store.count_unresolved_since(since)
        return self.store.count_unresolved_on_host_since(
            since, self.host.host_name, self.host.ip_address
        )

    def check(self) -> HealthCheckResult:
        """Run the check.

        Returns:
            HealthCheckResult; unhealthy if the count is positive or the query failed
        """
        since = self.clock() - self.time_window.to_timedelta()

        try:
            count = self._count_since(since)
        except Exception as e:
            if self.logger:
                self.logger.error(self.QUERY_FAILED_MESSAGE, error=str(e), exc_info=True)
            return HealthCheckResult(healthy=False, message=self.QUERY_FAILED_MESSAGE, error=e)

        if count > 0:
            return HealthCheckResult(
                healthy=False, message=f"{count}{self._message_suffix}", error_count=count
            )
        return HealthCheckResult(healthy=True, message=f"No{self._message_suffix}", error_count=0)
