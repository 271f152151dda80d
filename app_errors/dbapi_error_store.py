# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Plain-SQL error store implementation over any PEP 249 (DB-API 2.0) connection.

Useful when an application already talks to a relational database through
its own driver or ORM and does not want the SQLAlchemy dependency. Return
values and errors mirror :class:`~app_errors.sqlalchemy_error_store.SqlAlchemyErrorStore`.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Sequence

from .error_store import ErrorStore
from .exceptions import ErrorRecordNotFoundError, ErrorStoreBackendError, ErrorStoreError
from .models import DataStoreType, ErrorRecord, ErrorStatus
from .paging import (
    check_deletable_status,
    check_insertable,
    insert_or_increment,
    utc_now,
    zero_based_offset,
)
from .schema import TABLE_NAME, as_utc, record_from_row

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_COLUMNS = (
    "id, created_at, updated_at, num_times_occurred, description,"
    " exception_type, exception_message, exception_cause_type, exception_cause_message,"
    " stack_trace, resolved, host_name, ip_address, port"
)

_SELECT = f"select {_COLUMNS} from {TABLE_NAME}"

_INSERT = (
    f"insert into {TABLE_NAME}"
    " (created_at, updated_at, num_times_occurred, description, exception_type, exception_message,"
    " exception_cause_type, exception_cause_message, stack_trace, resolved, host_name, ip_address, port)"
    " values (?, ?, 1, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)

_RESOLVED_CLAUSE = {
    ErrorStatus.RESOLVED: " where resolved = ?",
    ErrorStatus.UNRESOLVED: " where resolved = ?",
    ErrorStatus.ALL: "",
}

SUPPORTED_PARAMSTYLES = ("qmark", "format", "pyformat")


def format_timestamp(value: datetime) -> str:
    """Render a datetime as a fixed-width UTC string that sorts chronologically."""
    return as_utc(value).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a timestamp column value (datetime or string) into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(str(value)))


class DbApiErrorStore(ErrorStore):
    """Error store issuing hand-written SQL through DB-API connections.

    Every call opens a connection from ``connection_factory``, commits on
    success, rolls back on failure, and closes the connection. Pass a pool's
    checkout function as the factory to reuse connections.
    """

    def __init__(
        self,
        connection_factory: Callable[[], Any],
        paramstyle: str = "qmark",
        returning_id: bool = False,
        data_store_type: DataStoreType = DataStoreType.SHARED,
    ):
        """Initialize DB-API error store.

        Args:
            connection_factory: Callable returning a new PEP 249 connection
            paramstyle: Driver placeholder style: "qmark" (?) or "format"/"pyformat" (%s)
            returning_id: Read the new id with ``RETURNING id`` (PostgreSQL) instead of
                ``cursor.lastrowid`` (SQLite, MySQL)
            data_store_type: Whether the database is shared between service instances

        Raises:
            ValueError: If paramstyle is not supported
        """
        if paramstyle not in SUPPORTED_PARAMSTYLES:
            raise ValueError(
                f"Unsupported paramstyle: {paramstyle}. "
                f"Must be one of: {', '.join(SUPPORTED_PARAMSTYLES)}"
            )

        self.connection_factory = connection_factory
        self.paramstyle = paramstyle
        self.returning_id = returning_id
        self._data_store_type = data_store_type

    @property
    def data_store_type(self) -> DataStoreType:
        return self._data_store_type

    def _sql(self, sql: str) -> str:
        if self.paramstyle == "qmark":
            return sql
        return sql.replace("?", "%s")

    @contextmanager
    def _cursor(self, operation: str) -> Iterator[Any]:
        try:
            conn = self.connection_factory()
        except Exception as e:
            logger.error("DbApiErrorStore: unable to open connection - %s", e)
            raise ErrorStoreBackendError(f"Failed to {operation}: unable to open connection: {e}") from e

        try:
            cursor = conn.cursor()
            try:
                yield cursor
            finally:
                cursor.close()
            conn.commit()
        except ErrorStoreError:
            conn.rollback()
            raise
        except Exception as e:
            conn.rollback()
            logger.error("DbApiErrorStore: %s failed - %s", operation, e)
            raise ErrorStoreBackendError(f"Failed to {operation}: {e}") from e
        finally:
            conn.close()

    def _execute(self, operation: str, sql: str, params: Sequence[Any] = ()) -> int:
        with self._cursor(operation) as cursor:
            cursor.execute(self._sql(sql), tuple(params))
            return cursor.rowcount

    def _query(self, operation: str, sql: str, params: Sequence[Any] = ()) -> list[ErrorRecord]:
        with self._cursor(operation) as cursor:
            cursor.execute(self._sql(sql), tuple(params))
            names = [column[0] for column in cursor.description]
            rows = cursor.fetchall()

        return [self._record_from(dict(zip(names, row))) for row in rows]

    def _count(self, sql: str, params: Sequence[Any] = ()) -> int:
        with self._cursor("count error records") as cursor:
            cursor.execute(self._sql(sql), tuple(params))
            row = cursor.fetchone()

        if row is None:
            raise ErrorStoreBackendError("Count query returned no rows")
        return int(row[0])

    @staticmethod
    def _record_from(row: dict[str, Any]) -> ErrorRecord:
        row["created_at"] = parse_timestamp(row["created_at"])
        row["updated_at"] = parse_timestamp(row["updated_at"])
        return record_from_row(row)

    def get_by_id(self, record_id: int) -> ErrorRecord | None:
        records = self._query("get error record", f"{_SELECT} where id = ?", (record_id,))
        if not records:
            logger.debug(f"DbApiErrorStore: error record {record_id} not found")
            return None
        return records[0]

    def count(self, status: ErrorStatus) -> int:
        if status == ErrorStatus.ALL:
            return self.count_all()
        if status == ErrorStatus.RESOLVED:
            return self.count_resolved()
        return self.count_unresolved()

    def count_all(self) -> int:
        return self._count(f"select count(id) from {TABLE_NAME}")

    def count_resolved(self) -> int:
        return self._count(f"select count(id) from {TABLE_NAME} where resolved = ?", (True,))

    def count_unresolved(self) -> int:
        return self._count(f"select count(id) from {TABLE_NAME} where resolved = ?", (False,))

    def count_unresolved_since(self, since: datetime) -> int:
        return self._count(
            f"select count(id) from {TABLE_NAME} where resolved = ? and updated_at >= ?",
            (False, format_timestamp(since)),
        )

    def count_unresolved_on_host_since(
        self, since: datetime, host_name: str, ip_address: str
    ) -> int:
        return self._count(
            f"select count(id) from {TABLE_NAME}"
            " where resolved = ? and updated_at >= ? and host_name = ? and ip_address = ?",
            (False, format_timestamp(since), host_name, ip_address),
        )

    def list_page(
        self, status: ErrorStatus, page_number: int, page_size: int
    ) -> list[ErrorRecord]:
        offset = zero_based_offset(page_number, page_size)

        params: list[Any] = []
        if status != ErrorStatus.ALL:
            params.append(status == ErrorStatus.RESOLVED)

        # limit before offset; some engines reject the other order
        sql = f"{_SELECT}{_RESOLVED_CLAUSE[status]} order by updated_at desc limit {page_size} offset {offset}"
        return self._query("list error records", sql, params)

    def find_unresolved_by_description(
        self, description: str, host_name: str | None = None
    ) -> list[ErrorRecord]:
        sql = f"{_SELECT} where resolved = ? and description = ?"
        params: list[Any] = [False, description]
        if host_name is not None:
            sql += " and host_name = ?"
            params.append(host_name)
        sql += " order by updated_at desc"

        return self._query("find unresolved error records", sql, params)

    def insert(self, record: ErrorRecord) -> int:
        check_insertable(record)

        now = format_timestamp(utc_now())
        params = (
            now,
            now,
            record.description,
            record.exception_type,
            record.exception_message,
            record.exception_cause_type,
            record.exception_cause_message,
            record.stack_trace,
            False,
            record.host_name,
            record.ip_address,
            record.port,
        )
        sql = _INSERT + " returning id" if self.returning_id else _INSERT

        with self._cursor("insert error record") as cursor:
            cursor.execute(self._sql(sql), params)
            if self.returning_id:
                row = cursor.fetchone()
                record_id = row[0] if row else None
            else:
                record_id = cursor.lastrowid

        if record_id is None:
            raise ErrorStoreBackendError("Insert did not return a generated id")

        logger.debug(f"DbApiErrorStore: inserted error record {record_id}")
        return int(record_id)

    def increment_count(self, record_id: int) -> None:
        count = self._execute(
            "increment error record count",
            f"update {TABLE_NAME}"
            " set num_times_occurred = num_times_occurred + 1, updated_at = ? where id = ?",
            (format_timestamp(utc_now()), record_id),
        )
        if count != 1:
            raise ErrorRecordNotFoundError(
                f"Unable to increment count. No error record found with id {record_id}",
                record_id=record_id,
            )

    def insert_or_increment_count(self, record: ErrorRecord) -> int:
        return insert_or_increment(self, record)

    def resolve(self, record_id: int) -> ErrorRecord:
        count = self._execute(
            "resolve error record",
            f"update {TABLE_NAME} set resolved = ?, updated_at = ? where id = ?",
            (True, format_timestamp(utc_now()), record_id),
        )
        if count != 1:
            raise ErrorRecordNotFoundError(
                f"Unable to resolve. No error record found with id {record_id}",
                record_id=record_id,
            )

        resolved = self.get_by_id(record_id)
        if resolved is None:
            raise ErrorRecordNotFoundError(
                f"Error record {record_id} was deleted after being resolved",
                record_id=record_id,
            )
        return resolved

    def resolve_all_unresolved(self) -> int:
        return self._execute(
            "resolve all error records",
            f"update {TABLE_NAME} set resolved = ?, updated_at = ? where resolved = ?",
            (True, format_timestamp(utc_now()), False),
        )

    def delete_before(self, status: ErrorStatus, cutoff: datetime) -> int:
        check_deletable_status(status)

        count = self._execute(
            "delete expired error records",
            f"delete from {TABLE_NAME} where resolved = ? and created_at < ?",
            (status == ErrorStatus.RESOLVED, format_timestamp(cutoff)),
        )
        logger.debug(f"DbApiErrorStore: deleted {count} {status.value} error records")
        return count
