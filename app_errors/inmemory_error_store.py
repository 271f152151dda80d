# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""In-memory error store for single-process use, testing and local development."""

import itertools
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable

from .error_store import ErrorStore
from .exceptions import ErrorRecordNotFoundError
from .models import DataStoreType, ErrorRecord, ErrorStatus
from .paging import (
    as_utc,
    check_deletable_status,
    check_insertable,
    insert_or_increment,
    utc_now,
    zero_based_offset,
)

logger = logging.getLogger(__name__)


def _matches_status(status: ErrorStatus) -> Callable[[ErrorRecord], bool]:
    if status == ErrorStatus.ALL:
        return lambda record: True
    if status == ErrorStatus.RESOLVED:
        return lambda record: record.resolved
    return lambda record: not record.resolved


class InMemoryErrorStore(ErrorStore):
    """Error store backed by a dict of id -> record.

    Each single read or write of the dict is atomic, but
    :meth:`insert_or_increment_count` is a lookup followed by a write, so two
    threads reporting the same new problem at once can both insert.
    """

    def __init__(self):
        """Initialize in-memory error store."""
        self.errors: dict[int, ErrorRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def data_store_type(self) -> DataStoreType:
        return DataStoreType.NOT_SHARED

    def _snapshot(self) -> list[ErrorRecord]:
        with self._lock:
            return list(self.errors.values())

    def _select(self, status: ErrorStatus) -> list[ErrorRecord]:
        predicate = _matches_status(status)
        return [record for record in self._snapshot() if predicate(record)]

    def get_by_id(self, record_id: int) -> ErrorRecord | None:
        with self._lock:
            return self.errors.get(record_id)

    def count(self, status: ErrorStatus) -> int:
        return len(self._select(status))

    def count_all(self) -> int:
        with self._lock:
            return len(self.errors)

    def count_resolved(self) -> int:
        return self.count(ErrorStatus.RESOLVED)

    def count_unresolved(self) -> int:
        return self.count(ErrorStatus.UNRESOLVED)

    def count_unresolved_since(self, since: datetime) -> int:
        since = as_utc(since)
        return sum(
            1 for record in self._select(ErrorStatus.UNRESOLVED)
            if record.updated_at >= since
        )

    def count_unresolved_on_host_since(
        self, since: datetime, host_name: str, ip_address: str
    ) -> int:
        since = as_utc(since)
        return sum(
            1 for record in self._select(ErrorStatus.UNRESOLVED)
            if record.host_name == host_name
            and record.ip_address == ip_address
            and record.updated_at >= since
        )

    def list_page(
        self, status: ErrorStatus, page_number: int, page_size: int
    ) -> list[ErrorRecord]:
        offset = zero_based_offset(page_number, page_size)
        records = sorted(self._select(status), key=lambda record: record.updated_at, reverse=True)
        return records[offset:offset + page_size]

    def find_unresolved_by_description(
        self, description: str, host_name: str | None = None
    ) -> list[ErrorRecord]:
        return [
            record for record in self._select(ErrorStatus.UNRESOLVED)
            if record.description == description
            and (host_name is None or record.host_name == host_name)
        ]

    def insert(self, record: ErrorRecord) -> int:
        check_insertable(record)

        now = utc_now()
        with self._lock:
            record_id = next(self._ids)
            self.errors[record_id] = replace(
                record,
                id=record_id,
                created_at=now,
                updated_at=now,
                num_times_occurred=1,
                resolved=False,
            )

        logger.debug(f"InMemoryErrorStore: inserted error record {record_id}")
        return record_id

    def _update(
        self, record_id: int, action: str, change: Callable[[ErrorRecord], ErrorRecord]
    ) -> ErrorRecord:
        with self._lock:
            existing = self.errors.get(record_id)
            if existing is None:
                raise ErrorRecordNotFoundError(
                    f"Unable to {action}. No error record found with id {record_id}",
                    record_id=record_id,
                )
            updated = replace(change(existing), updated_at=utc_now())
            self.errors[record_id] = updated
            return updated

    def increment_count(self, record_id: int) -> None:
        self._update(
            record_id,
            "increment count",
            lambda existing: replace(existing, num_times_occurred=existing.num_times_occurred + 1),
        )

    def insert_or_increment_count(self, record: ErrorRecord) -> int:
        return insert_or_increment(self, record)

    def resolve(self, record_id: int) -> ErrorRecord:
        return self._update(record_id, "resolve", lambda existing: replace(existing, resolved=True))

    def resolve_all_unresolved(self) -> int:
        changed = 0
        for record in self._select(ErrorStatus.UNRESOLVED):
            try:
                self.resolve(record.id)
                changed += 1
            except ErrorRecordNotFoundError:
                logger.debug(f"InMemoryErrorStore: error record {record.id} deleted before resolve")
        return changed

    def delete_before(self, status: ErrorStatus, cutoff: datetime) -> int:
        check_deletable_status(status)
        cutoff = as_utc(cutoff)
        predicate = _matches_status(status)

        with self._lock:
            expired = [
                record_id for record_id, record in self.errors.items()
                if predicate(record) and record.created_at < cutoff
            ]
            for record_id in expired:
                del self.errors[record_id]

        logger.debug(f"InMemoryErrorStore: deleted {len(expired)} {status.value} error records")
        return len(expired)

    def clear(self) -> None:
        """Remove all records (useful for testing)."""
        with self._lock:
            self.errors.clear()
