# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Wiring of the store, health check and cleanup scheduler from configuration."""

import logging
from dataclasses import dataclass
from typing import Any

from .cleanup import CleanupErrorsJob, CleanupScheduler
from .config import ErrorTrackingConfig
from .error_store import ErrorStore
from .factory import create_error_store_from_config
from .health import RecentErrorsHealthCheck
from .logger import Logger
from .models import DataStoreType, HostIdentity, get_host_identity

logger = logging.getLogger(__name__)


@dataclass
class ErrorContext:
    """Everything error tracking set up for one service.

    Attributes:
        store: Error store shared by the whole service
        health_check: Recent errors health check, or None when turned off
        cleanup_scheduler: Started cleanup scheduler, or None when turned off
    """

    store: ErrorStore
    health_check: RecentErrorsHealthCheck | None = None
    cleanup_scheduler: CleanupScheduler | None = None

    @property
    def data_store_type(self) -> DataStoreType:
        return self.store.data_store_type

    def close(self) -> None:
        """Stop the cleanup scheduler and close the store."""
        if self.cleanup_scheduler is not None:
            self.cleanup_scheduler.stop()
        self.store.close()


def setup_error_tracking(
    config: ErrorTrackingConfig,
    service_logger: Logger | None = None,
    host: HostIdentity | None = None,
    **store_kwargs: Any,
) -> ErrorContext:
    """Create the error store and, when enabled, the health check and cleanup scheduler.

    Args:
        config: Error tracking configuration
        service_logger: Logger for the health check and cleanup job
        host: Identity the health check counts errors for (default: the process host identity)
        **store_kwargs: Extra backend arguments passed to the store factory

    Returns:
        ErrorContext holding the store and whichever parts are enabled
    """
    store = create_error_store_from_config(config, **store_kwargs)

    health_check = None
    if config.add_health_check:
        health_check = RecentErrorsHealthCheck(
            store,
            host=host if host is not None else get_host_identity(),
            time_window=config.time_window,
            logger=service_logger,
        )
    else:
        logger.info("Recent errors health check disabled")

    cleanup_scheduler = None
    if config.add_cleanup_job:
        job = CleanupErrorsJob(config.cleanup, store, logger=service_logger)
        cleanup_scheduler = CleanupScheduler(job)
        cleanup_scheduler.start()
    else:
        logger.info("Application error cleanup job disabled")

    logger.debug(
        "Error tracking set up with %s store (health check: %s, cleanup job: %s)",
        config.store_type,
        health_check is not None,
        cleanup_scheduler is not None,
    )
    return ErrorContext(store=store, health_check=health_check, cleanup_scheduler=cleanup_scheduler)
