# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Periodic deletion of expired error records."""

import itertools
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .config import CleanupConfig, CleanupStrategy
from .error_store import ErrorStore
from .logger import Logger
from .models import ErrorStatus
from .paging import utc_now

_thread_counter = itertools.count(1)


@dataclass
class CleanupResult:
    """Number of records deleted by one cleanup run."""

    resolved_deleted: int
    unresolved_deleted: int = 0


class CleanupErrorsJob:
    """Deletes resolved, and optionally unresolved, records older than their retention."""

    def __init__(
        self,
        config: CleanupConfig,
        store: ErrorStore,
        logger: Logger | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.store = store
        self.logger = logger
        self.clock = clock

    def run(self) -> CleanupResult:
        """Run one cleanup pass.

        Returns:
            CleanupResult with the number of records deleted per status

        Raises:
            Exception: Whatever the store raises
        """
        now = self.clock()

        resolved_cutoff = now - self.config.resolved_error_expiration
        resolved_deleted = self.store.delete_before(ErrorStatus.RESOLVED, resolved_cutoff)
        if self.logger:
            self.logger.debug(
                "Deleted expired resolved application errors",
                count=resolved_deleted,
                cutoff=resolved_cutoff.isoformat(),
            )

        unresolved_deleted = 0
        if self.config.cleanup_strategy == CleanupStrategy.ALL_ERRORS:
            unresolved_cutoff = now - self.config.unresolved_error_expiration
            unresolved_deleted = self.store.delete_before(ErrorStatus.UNRESOLVED, unresolved_cutoff)
            if self.logger:
                self.logger.debug(
                    "Deleted expired unresolved application errors",
                    count=unresolved_deleted,
                    cutoff=unresolved_cutoff.isoformat(),
                )

        return CleanupResult(resolved_deleted=resolved_deleted, unresolved_deleted=unresolved_deleted)

    def run_safely(self) -> CleanupResult | None:
        """Run one cleanup pass, logging instead of raising on failure.

        Returns:
            CleanupResult, or None if the run failed
        """
        try:
            return self.run()
        except Exception as e:
            if self.logger:
                self.logger.error(
                    "Error in scheduled application error cleanup",
                    error=str(e),
                    exc_info=True,
                )
            return None


class CleanupScheduler:
    """Runs a CleanupErrorsJob on a background thread with a fixed delay between runs."""

    STOP_TIMEOUT_SECONDS = 10

    def __init__(
        self,
        job: CleanupErrorsJob,
        initial_delay_seconds: float | None = None,
        interval_seconds: float | None = None,
        name: str | None = None,
        logger: Logger | None = None,
    ):
        """Initialize the scheduler.

        Args:
            job: Cleanup job to run
            initial_delay_seconds: Delay before the first run (default from the job's config)
            interval_seconds: Delay after each run (default from the job's config)
            name: Thread name pattern; ``%d`` is replaced with a counter
            logger: Logger instance (default: the job's logger)
        """
        config = job.config
        self.job = job
        self.initial_delay_seconds = (
            config.initial_job_delay.total_seconds() if initial_delay_seconds is None else initial_delay_seconds
        )
        self.interval_seconds = (
            config.job_interval.total_seconds() if interval_seconds is None else interval_seconds
        )
        self.name = name or config.cleanup_job_name
        self.logger = logger or job.logger
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    def _thread_name(self) -> str:
        if "%d" in self.name:
            return self.name % next(_thread_counter)
        return self.name

    def start(self):
        """Start the scheduler in a background thread."""
        if self._running:
            if self.logger:
                self.logger.warning("Cleanup scheduler already running")
            return

        # One event per start; a loop still finishing an earlier run keeps its own, already set
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run_loop, args=(self._stop_event,), name=self._thread_name(), daemon=True
        )
        self._thread.start()
        self._running = True

        if self.logger:
            self.logger.info(
                "Application error cleanup scheduler started",
                initial_delay_seconds=self.initial_delay_seconds,
                interval_seconds=self.interval_seconds,
            )

    def stop(self):
        """Stop the scheduler."""
        if not self._running:
            return

        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=self.STOP_TIMEOUT_SECONDS)

        self._running = False

        if self._thread and self._thread.is_alive():
            if self.logger:
                self.logger.warning(
                    "Cleanup scheduler thread still finishing a run after stop",
                    thread=self._thread.name,
                )
        elif self.logger:
            self.logger.info("Application error cleanup scheduler stopped")

    def _run_loop(self, stop_event: threading.Event):
        if stop_event.wait(self.initial_delay_seconds):
            return

        while not stop_event.is_set():
            start_time = time.monotonic()
            result = self.job.run_safely()

            if result is not None and self.logger:
                self.logger.info(
                    "Application error cleanup run completed",
                    duration_seconds=time.monotonic() - start_time,
                    resolved_deleted=result.resolved_deleted,
                    unresolved_deleted=result.unresolved_deleted,
                )

            stop_event.wait(self.interval_seconds)

    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running
