# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for app_errors tests."""

import sqlite3

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app_errors import (
    DataStoreType,
    DbApiErrorStore,
    InMemoryErrorStore,
    SqlAlchemyErrorStore,
    clear_host_identity,
    create_logger,
    create_schema,
    set_host_identity,
)

from .helpers import HOST


@pytest.fixture(autouse=True)
def host_identity():
    """Set the process host identity for each test and clear it afterwards."""
    set_host_identity(HOST)
    yield HOST
    clear_host_identity()


@pytest.fixture
def silent_logger():
    """Create a silent logger that keeps entries for assertions."""
    return create_logger(logger_type="silent", level="DEBUG", name="app-errors-test")


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine with the application_errors table."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_file(tmp_path):
    """Path to a SQLite database file with the application_errors table."""
    path = tmp_path / "errors.db"
    engine = create_engine(f"sqlite:///{path}")
    create_schema(engine)
    engine.dispose()
    return str(path)


@pytest.fixture
def dbapi_store(sqlite_file):
    """DB-API store over sqlite3 connections to a temp file."""
    return DbApiErrorStore(
        lambda: sqlite3.connect(sqlite_file),
        data_store_type=DataStoreType.NOT_SHARED,
    )


@pytest.fixture(params=["inmemory", "sqlalchemy", "dbapi"])
def store(request):
    """Each storing backend, in turn."""
    if request.param == "inmemory":
        error_store = InMemoryErrorStore()
    elif request.param == "sqlalchemy":
        error_store = SqlAlchemyErrorStore(request.getfixturevalue("sqlite_engine"))
    else:
        error_store = request.getfixturevalue("dbapi_store")

    yield error_store
    error_store.close()
