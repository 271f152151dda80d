# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""No-op error store used when error tracking is turned off."""

import logging
from datetime import datetime

from .error_store import ErrorStore
from .models import DataStoreType, ErrorRecord, ErrorStatus

logger = logging.getLogger(__name__)


class NoOpErrorStore(ErrorStore):
    """Error store that discards every write and answers every query with nothing.

    Never raises, including for arguments other stores would reject.
    """

    def __init__(self, **kwargs):
        """Initialize no-op error store.

        Args:
            **kwargs: Ignored (for compatibility with factory method)
        """
        pass

    @property
    def data_store_type(self) -> DataStoreType:
        return DataStoreType.NOT_SHARED

    def get_by_id(self, record_id: int) -> ErrorRecord | None:
        return None

    def count(self, status: ErrorStatus) -> int:
        return 0

    def count_all(self) -> int:
        return 0

    def count_resolved(self) -> int:
        return 0

    def count_unresolved(self) -> int:
        return 0

    def count_unresolved_since(self, since: datetime) -> int:
        return 0

    def count_unresolved_on_host_since(
        self, since: datetime, host_name: str, ip_address: str
    ) -> int:
        return 0

    def list_page(
        self, status: ErrorStatus, page_number: int, page_size: int
    ) -> list[ErrorRecord]:
        return []

    def find_unresolved_by_description(
        self, description: str, host_name: str | None = None
    ) -> list[ErrorRecord]:
        return []

    def insert(self, record: ErrorRecord) -> int:
        logger.debug("NoOpErrorStore: discarding error record '%s'", record.description)
        return 0

    def increment_count(self, record_id: int) -> None:
        pass

    def insert_or_increment_count(self, record: ErrorRecord) -> int:
        logger.debug("NoOpErrorStore: discarding error record '%s'", record.description)
        return 0

    def resolve(self, record_id: int) -> ErrorRecord | None:
        return None

    def resolve_all_unresolved(self) -> int:
        return 0

    def delete_before(self, status: ErrorStatus, cutoff: datetime) -> int:
        return 0
