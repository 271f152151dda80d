# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Relational schema for persisted error records."""

from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Engine,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    false,
    func,
    text,
)

from .models import ErrorRecord
from .paging import as_utc

TABLE_NAME = "application_errors"

metadata = MetaData()

application_errors = Table(
    TABLE_NAME,
    metadata,
    # SQLite only auto-increments INTEGER PRIMARY KEY columns
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()),
    Column("num_times_occurred", Integer, nullable=False, server_default=text("1")),
    Column("description", Text, nullable=False),
    Column("exception_type", String(256)),
    Column("exception_message", Text),
    Column("exception_cause_type", String(256)),
    Column("exception_cause_message", Text),
    Column("stack_trace", Text),
    Column("resolved", Boolean, nullable=False, server_default=false()),
    Column("host_name", String(256)),
    Column("ip_address", String(256)),
    Column("port", Integer),
)


def create_schema(engine: Engine) -> None:
    """Create the application_errors table if it does not exist."""
    metadata.create_all(engine, tables=[application_errors])


def record_from_row(row: Mapping[str, Any]) -> ErrorRecord:
    """Map a result row (by column name) to an ErrorRecord."""
    return ErrorRecord(
        id=row["id"],
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
        num_times_occurred=row["num_times_occurred"],
        description=row["description"],
        exception_type=row["exception_type"],
        exception_message=row["exception_message"],
        exception_cause_type=row["exception_cause_type"],
        exception_cause_message=row["exception_cause_message"],
        stack_trace=row["stack_trace"],
        resolved=bool(row["resolved"]),
        host_name=row["host_name"],
        ip_address=row["ip_address"],
        port=row["port"],
    )


def insert_values(record: ErrorRecord, now: datetime) -> dict[str, Any]:
    """Column values for inserting ``record``; timestamps and resolved are store-assigned."""
    return {
        "created_at": now,
        "updated_at": now,
        "num_times_occurred": 1,
        "description": record.description,
        "exception_type": record.exception_type,
        "exception_message": record.exception_message,
        "exception_cause_type": record.exception_cause_type,
        "exception_cause_message": record.exception_cause_message,
        "stack_trace": record.stack_trace,
        "resolved": False,
        "host_name": record.host_name,
        "ip_address": record.ip_address,
        "port": record.port,
    }
