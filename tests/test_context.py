# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for setting up error tracking from configuration."""

from unittest.mock import patch

import pytest

from app_errors import (
    CleanupScheduler,
    DataStoreType,
    ErrorContext,
    ErrorTrackingConfig,
    InMemoryErrorStore,
    NoOpErrorStore,
    RecentErrorsHealthCheck,
    SqlAlchemyErrorStore,
    StaticConfigProvider,
    TimeUnit,
    TimeWindow,
    new_unresolved_error,
    setup_error_tracking,
)

from .helpers import HOST, OTHER_HOST


@pytest.fixture
def context_factory():
    """Set up error tracking and close every context when the test ends."""
    contexts = []

    def build(config, *args, **kwargs):
        context = setup_error_tracking(config, *args, **kwargs)
        contexts.append(context)
        return context

    yield build

    for context in contexts:
        context.close()


class TestSetupErrorTracking:
    """Tests for setup_error_tracking."""

    def test_defaults_enable_everything(self, context_factory, silent_logger):
        """Test that the default config creates a health check and starts the cleanup scheduler."""
        context = context_factory(ErrorTrackingConfig(), silent_logger)

        assert isinstance(context, ErrorContext)
        assert isinstance(context.store, InMemoryErrorStore)
        assert isinstance(context.health_check, RecentErrorsHealthCheck)
        assert isinstance(context.cleanup_scheduler, CleanupScheduler)
        assert context.cleanup_scheduler.is_running()
        assert context.data_store_type == DataStoreType.NOT_SHARED

    def test_flags_off(self, context_factory):
        """Test that turning both flags off creates neither part."""
        config = ErrorTrackingConfig(add_health_check=False, add_cleanup_job=False)

        context = context_factory(config)

        assert isinstance(context.store, InMemoryErrorStore)
        assert context.health_check is None
        assert context.cleanup_scheduler is None

    def test_flags_from_provider(self, context_factory):
        """Test that flags read from a provider decide what is created."""
        provider = StaticConfigProvider({
            "ERROR_STORE_TYPE": "noop",
            "ERROR_HEALTH_CHECK_ENABLED": "true",
            "ERROR_CLEANUP_ENABLED": "false",
        })

        context = context_factory(ErrorTrackingConfig.from_provider(provider))

        assert isinstance(context.store, NoOpErrorStore)
        assert context.health_check is not None
        assert context.cleanup_scheduler is None

    def test_health_check_uses_config_window(self, context_factory):
        """Test that the health check gets the configured time window."""
        config = ErrorTrackingConfig(time_window=TimeWindow(2, TimeUnit.HOURS), add_cleanup_job=False)

        context = context_factory(config)

        assert context.health_check.time_window == TimeWindow(2, TimeUnit.HOURS)
        assert "last 2 hours" in context.health_check.check().message

    def test_health_check_defaults_to_process_host(self, context_factory):
        """Test that the health check counts errors from the process host identity."""
        context = context_factory(ErrorTrackingConfig(add_cleanup_job=False))
        context.store.insert(new_unresolved_error("boom", host=OTHER_HOST))

        assert context.health_check.host == HOST
        assert context.health_check.check().healthy

        context.store.insert(new_unresolved_error("boom"))
        result = context.health_check.check()
        assert not result.healthy
        assert result.error_count == 1

    def test_explicit_host(self, context_factory):
        """Test that an explicit host overrides the process host identity."""
        context = context_factory(ErrorTrackingConfig(add_cleanup_job=False), host=OTHER_HOST)

        assert context.health_check.host == OTHER_HOST

    def test_cleanup_scheduler_uses_config(self, context_factory, silent_logger):
        """Test that the scheduler runs the configured cleanup against the created store."""
        config = ErrorTrackingConfig(add_health_check=False)

        context = context_factory(config, silent_logger)
        scheduler = context.cleanup_scheduler

        assert scheduler.job.store is context.store
        assert scheduler.job.config is config.cleanup
        assert scheduler.initial_delay_seconds == config.cleanup.initial_job_delay.total_seconds()
        assert scheduler.interval_seconds == config.cleanup.job_interval.total_seconds()
        assert scheduler.logger is silent_logger

    def test_store_kwargs_passed_to_factory(self, context_factory):
        """Test that extra arguments reach the store factory."""
        config = ErrorTrackingConfig(store_type="sqlalchemy", add_health_check=False, add_cleanup_job=False)

        context = context_factory(config, url="sqlite://")

        assert isinstance(context.store, SqlAlchemyErrorStore)

    def test_close_stops_scheduler_and_closes_store(self):
        """Test that closing the context stops the scheduler and closes the store."""
        context = setup_error_tracking(ErrorTrackingConfig(add_health_check=False))

        with patch.object(context.store, "close") as mock_close:
            context.close()

        assert not context.cleanup_scheduler.is_running()
        mock_close.assert_called_once()
