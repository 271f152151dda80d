# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Validation and dedup helpers shared by all error store backends."""

import logging
from datetime import datetime, timezone

from .error_store import ErrorStore
from .exceptions import InvalidArgumentError
from .models import ErrorRecord, ErrorStatus

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (as returned by SQLite) and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def zero_based_offset(page_number: int, page_size: int) -> int:
    """Validate paging arguments and compute the row offset.

    Args:
        page_number: One-based page number
        page_size: Number of records per page

    Returns:
        ``(page_number - 1) * page_size``

    Raises:
        InvalidArgumentError: If page_number < 1 or page_size < 1
    """
    if page_number < 1:
        raise InvalidArgumentError(f"page_number starts at 1, but was {page_number}")
    if page_size < 1:
        raise InvalidArgumentError(f"page_size must be at least 1, but was {page_size}")
    return (page_number - 1) * page_size


def check_insertable(record: ErrorRecord) -> None:
    """Reject records that already carry an id."""
    if record.id is not None:
        raise InvalidArgumentError("Cannot insert a record that has an id")


def check_deletable_status(status: ErrorStatus) -> None:
    """Only RESOLVED or UNRESOLVED records can be deleted by age."""
    if status not in (ErrorStatus.RESOLVED, ErrorStatus.UNRESOLVED):
        raise InvalidArgumentError(f"status must be RESOLVED or UNRESOLVED, but was {status}")


def insert_or_increment(store: ErrorStore, record: ErrorRecord) -> int:
    """Insert ``record`` unless an unresolved record with the same description and host exists.

    When matches exist, the first one gets its count incremented and its id
    is returned; the remaining fields of ``record`` are discarded. The lookup
    and the write are two separate store calls with no lock or transaction
    around them.

    Args:
        store: Store to write to
        record: Occurrence to record

    Returns:
        ID of the inserted or incremented record

    Raises:
        InvalidArgumentError: If the record has no description
    """
    if record.description is None:
        raise InvalidArgumentError("Error description cannot be None")

    matches = store.find_unresolved_by_description(record.description, record.host_name)
    if not matches:
        return store.insert(record)

    existing_id = matches[0].id
    store.increment_count(existing_id)
    logger.debug("Incremented occurrence count of error record %s", existing_id)
    return existing_id
