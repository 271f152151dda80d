# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests specific to DbApiErrorStore."""

import sqlite3
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app_errors import (
    DataStoreType,
    DbApiErrorStore,
    ErrorRecordNotFoundError,
    ErrorStatus,
    ErrorStoreBackendError,
    InvalidArgumentError,
    new_unresolved_error,
)
from app_errors.dbapi_error_store import format_timestamp, parse_timestamp


def mock_connection(rowcount=1, fetchone=None, lastrowid=None):
    """Create a mock DB-API connection with one cursor."""
    cursor = MagicMock()
    cursor.rowcount = rowcount
    cursor.fetchone.return_value = fetchone
    cursor.lastrowid = lastrowid
    conn = MagicMock()
    conn.cursor.return_value = cursor
    return conn, cursor


class TestTimestamps:
    """Tests for timestamp formatting and parsing."""

    def test_format_is_fixed_width_utc(self):
        """Test that aware datetimes are rendered in UTC with microseconds."""
        value = datetime(2024, 3, 5, 14, 7, 9, 120, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(value) == "2024-03-05 12:07:09.000120"

    def test_parse_string(self):
        """Test parsing the stored string format."""
        parsed = parse_timestamp("2024-03-05 12:07:09.000120")

        assert parsed == datetime(2024, 3, 5, 12, 7, 9, 120, tzinfo=timezone.utc)

    def test_parse_naive_datetime(self):
        """Test that naive datetimes from drivers are treated as UTC."""
        parsed = parse_timestamp(datetime(2024, 3, 5, 12, 0))

        assert parsed.tzinfo == timezone.utc

    def test_parse_none(self):
        """Test that NULL stays None."""
        assert parse_timestamp(None) is None


class TestDbApiErrorStoreOptions:
    """Tests for constructor options."""

    def test_unsupported_paramstyle(self):
        """Test that unsupported paramstyles are rejected."""
        with pytest.raises(ValueError, match="Unsupported paramstyle"):
            DbApiErrorStore(MagicMock(), paramstyle="named")

    def test_default_shared(self):
        """Test that the store is SHARED unless told otherwise."""
        assert DbApiErrorStore(MagicMock()).data_store_type == DataStoreType.SHARED

    def test_format_paramstyle_rewrites_placeholders(self):
        """Test that format paramstyle sends %s placeholders."""
        conn, cursor = mock_connection(rowcount=1)
        store = DbApiErrorStore(lambda: conn, paramstyle="format")

        store.increment_count(5)

        sql = cursor.execute.call_args[0][0]
        assert "?" not in sql
        assert "where id = %s" in sql

    def test_returning_id(self):
        """Test reading the generated id with RETURNING."""
        conn, cursor = mock_connection(fetchone=(17,))
        store = DbApiErrorStore(lambda: conn, paramstyle="pyformat", returning_id=True)

        record_id = store.insert(new_unresolved_error("x"))

        assert record_id == 17
        assert cursor.execute.call_args[0][0].endswith(" returning id")
        conn.commit.assert_called_once()
        conn.close.assert_called_once()

    def test_list_page_puts_limit_before_offset(self):
        """Test the paging clause order and values."""
        conn, cursor = mock_connection()
        cursor.description = [("id",)]
        cursor.fetchall.return_value = []
        store = DbApiErrorStore(lambda: conn)

        store.list_page(ErrorStatus.RESOLVED, 3, 20)

        sql, params = cursor.execute.call_args[0]
        assert sql.endswith("order by updated_at desc limit 20 offset 40")
        assert params == (True,)


class TestDbApiErrorStoreTransactions:
    """Tests for connection handling."""

    def test_commit_and_close_on_success(self):
        """Test that successful calls commit and close."""
        conn, _ = mock_connection(rowcount=1)
        store = DbApiErrorStore(lambda: conn)

        store.increment_count(1)

        conn.commit.assert_called_once()
        conn.rollback.assert_not_called()
        conn.close.assert_called_once()

    def test_driver_error_rolls_back_and_wraps(self):
        """Test that driver errors roll back and become ErrorStoreBackendError."""
        conn, cursor = mock_connection()
        cursor.execute.side_effect = sqlite3.OperationalError("database is locked")
        store = DbApiErrorStore(lambda: conn)

        with pytest.raises(ErrorStoreBackendError, match="database is locked") as exc_info:
            store.increment_count(1)

        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        conn.close.assert_called_once()

    def test_connect_failure_wrapped(self):
        """Test that failing to open a connection is wrapped."""
        def connect():
            raise OSError("connection refused")

        store = DbApiErrorStore(connect)

        with pytest.raises(ErrorStoreBackendError, match="unable to open connection"):
            store.count_all()

    def test_no_row_updated(self):
        """Test that an update touching no rows raises ErrorRecordNotFoundError."""
        conn, _ = mock_connection(rowcount=0)
        store = DbApiErrorStore(lambda: conn)

        with pytest.raises(ErrorRecordNotFoundError, match="No error record found with id 9"):
            store.increment_count(9)

    def test_validation_before_connecting(self):
        """Test that invalid arguments fail without opening a connection."""
        connect = MagicMock()
        store = DbApiErrorStore(connect)

        with pytest.raises(InvalidArgumentError):
            store.list_page(ErrorStatus.ALL, 0, 10)

        connect.assert_not_called()


class TestDbApiErrorStoreSqlite:
    """Tests against a real sqlite3 database."""

    def test_timestamps_stored_as_text(self, dbapi_store, sqlite_file):
        """Test that timestamps are stored in the fixed-width format."""
        record_id = dbapi_store.insert(new_unresolved_error("x"))

        conn = sqlite3.connect(sqlite_file)
        try:
            (created_at,) = conn.execute(
                "select created_at from application_errors where id = ?", (record_id,)
            ).fetchone()
        finally:
            conn.close()

        assert len(created_at) == len("2024-01-01 00:00:00.000000")
        assert dbapi_store.get_by_id(record_id).created_at == parse_timestamp(created_at)
