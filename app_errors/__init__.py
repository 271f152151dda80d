# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Application error tracking.

Records errors raised inside a service as deduplicated, resolvable records
in a shared store, with a retention cleanup job and a health check that
reports unhealthy while recent unresolved errors exist.
"""

__version__ = "0.1.0"

from .cleanup import CleanupErrorsJob, CleanupResult, CleanupScheduler
from .config import (
    CleanupConfig,
    CleanupStrategy,
    ConfigProvider,
    EnvConfigProvider,
    ErrorTrackingConfig,
    StaticConfigProvider,
)
from .context import ErrorContext, setup_error_tracking
from .dbapi_error_store import DbApiErrorStore
from .error_store import ErrorStore
from .exceptions import (
    ErrorRecordNotFoundError,
    ErrorStoreBackendError,
    ErrorStoreError,
    HostIdentityNotConfiguredError,
    InvalidArgumentError,
)
from .factory import create_error_store, create_error_store_from_config
from .health import HealthCheckResult, RecentErrorsHealthCheck, TimeUnit, TimeWindow
from .inmemory_error_store import InMemoryErrorStore
from .logger import Logger, SilentLogger, StdoutLogger, create_logger
from .models import (
    DataStoreType,
    ErrorRecord,
    ErrorRecordPage,
    ErrorStatus,
    HostIdentity,
    build_page,
    clear_host_identity,
    get_host_identity,
    new_error,
    new_resolved_error,
    new_unresolved_error,
    set_host_identity,
)
from .noop_error_store import NoOpErrorStore
from .reporting import log_and_save_error
from .schema import create_schema
from .sqlalchemy_error_store import SqlAlchemyErrorStore

__all__ = [
    # Version
    "__version__",
    # Models
    "ErrorRecord",
    "ErrorRecordPage",
    "ErrorStatus",
    "DataStoreType",
    "HostIdentity",
    "build_page",
    "new_error",
    "new_resolved_error",
    "new_unresolved_error",
    "set_host_identity",
    "get_host_identity",
    "clear_host_identity",
    # Error Stores
    "ErrorStore",
    "SqlAlchemyErrorStore",
    "DbApiErrorStore",
    "InMemoryErrorStore",
    "NoOpErrorStore",
    "create_error_store",
    "create_error_store_from_config",
    "create_schema",
    # Cleanup and health
    "CleanupErrorsJob",
    "CleanupResult",
    "CleanupScheduler",
    "HealthCheckResult",
    "RecentErrorsHealthCheck",
    "TimeUnit",
    "TimeWindow",
    "log_and_save_error",
    # Configuration
    "CleanupConfig",
    "CleanupStrategy",
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    "ErrorTrackingConfig",
    "ErrorContext",
    "setup_error_tracking",
    # Logging
    "Logger",
    "StdoutLogger",
    "SilentLogger",
    "create_logger",
    # Exceptions
    "ErrorStoreError",
    "InvalidArgumentError",
    "ErrorRecordNotFoundError",
    "ErrorStoreBackendError",
    "HostIdentityNotConfiguredError",
]
