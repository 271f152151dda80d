# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory for creating error store instances based on configuration."""

import logging
import os
from typing import Any, Callable

from .config import ErrorTrackingConfig
from .dbapi_error_store import DbApiErrorStore
from .error_store import ErrorStore
from .inmemory_error_store import InMemoryErrorStore
from .noop_error_store import NoOpErrorStore
from .sqlalchemy_error_store import SqlAlchemyErrorStore

logger = logging.getLogger(__name__)


def _build_sqlalchemy(**kwargs: Any) -> ErrorStore:
    engine = kwargs.pop("engine", None)
    if engine is not None:
        return SqlAlchemyErrorStore(engine)

    url = kwargs.pop("url", None) or os.getenv("ERROR_STORE_DATABASE_URL")
    if not url:
        raise ValueError(
            "sqlalchemy error store requires url= or the ERROR_STORE_DATABASE_URL environment variable"
        )
    return SqlAlchemyErrorStore.from_url(url, **kwargs)


def _build_dbapi(**kwargs: Any) -> ErrorStore:
    if kwargs.get("connection_factory") is None:
        raise ValueError("dbapi error store requires a connection_factory")
    return DbApiErrorStore(**kwargs)


def _build_inmemory(**kwargs: Any) -> ErrorStore:
    return InMemoryErrorStore()


def _build_noop(**kwargs: Any) -> ErrorStore:
    return NoOpErrorStore(**kwargs)


_DRIVERS: dict[str, Callable[..., ErrorStore]] = {
    "sqlalchemy": _build_sqlalchemy,
    "dbapi": _build_dbapi,
    "inmemory": _build_inmemory,
    "noop": _build_noop,
}


def create_error_store(store_type: str | None = None, **kwargs: Any) -> ErrorStore:
    """Create an error store instance.

    Args:
        store_type: "sqlalchemy", "dbapi", "inmemory" or "noop".
            Defaults to the ERROR_STORE_TYPE environment variable, then "inmemory".
        **kwargs: Backend-specific arguments:
            - sqlalchemy: url (or ERROR_STORE_DATABASE_URL) or engine, plus create_engine options
            - dbapi: connection_factory, paramstyle, returning_id, data_store_type

    Returns:
        ErrorStore instance

    Raises:
        ValueError: If store_type is unknown or required arguments are missing
    """
    store_type = (store_type or os.getenv("ERROR_STORE_TYPE") or "inmemory").lower()

    try:
        build = _DRIVERS[store_type]
    except KeyError as exc:
        supported = ", ".join(sorted(_DRIVERS))
        raise ValueError(
            f"Unknown store_type: {store_type}. Supported drivers: {supported}"
        ) from exc

    logger.debug("Creating %s error store", store_type)
    return build(**kwargs)


def create_error_store_from_config(config: ErrorTrackingConfig, **kwargs: Any) -> ErrorStore:
    """Create an error store from typed configuration.

    Args:
        config: Error tracking configuration
        **kwargs: Extra backend arguments (e.g. connection_factory for dbapi)

    Returns:
        ErrorStore instance
    """
    if config.store_type == "sqlalchemy" and config.database_url and "url" not in kwargs:
        kwargs["url"] = config.database_url
    return create_error_store(config.store_type, **kwargs)
