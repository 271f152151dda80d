# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract error store interface implemented by every backend."""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import DataStoreType, ErrorRecord, ErrorStatus


class ErrorStore(ABC):
    """Abstract base class for error record storage backends.

    All methods must be safe to call concurrently from multiple threads in
    one process. Timestamps passed in and returned are timezone-aware UTC.
    """

    @property
    @abstractmethod
    def data_store_type(self) -> DataStoreType:
        """Whether this store is shared between service instances."""
        pass

    @abstractmethod
    def get_by_id(self, record_id: int) -> ErrorRecord | None:
        """Retrieve an error record by its ID.

        Args:
            record_id: Error record ID

        Returns:
            The record, or None if not found
        """
        pass

    @abstractmethod
    def count(self, status: ErrorStatus) -> int:
        """Count error records with the given status."""
        pass

    @abstractmethod
    def count_all(self) -> int:
        """Count all error records."""
        pass

    @abstractmethod
    def count_resolved(self) -> int:
        """Count resolved error records."""
        pass

    @abstractmethod
    def count_unresolved(self) -> int:
        """Count unresolved error records."""
        pass

    @abstractmethod
    def count_unresolved_since(self, since: datetime) -> int:
        """Count unresolved error records updated at or after ``since``."""
        pass

    @abstractmethod
    def count_unresolved_on_host_since(
        self, since: datetime, host_name: str, ip_address: str
    ) -> int:
        """Count unresolved error records from one host updated at or after ``since``.

        Args:
            since: Lower bound (inclusive) on updated_at
            host_name: Host name to match
            ip_address: IP address to match

        Returns:
            Number of matching records
        """
        pass

    @abstractmethod
    def list_page(
        self, status: ErrorStatus, page_number: int, page_size: int
    ) -> list[ErrorRecord]:
        """Return one page of records ordered by updated_at descending.

        Args:
            status: Resolution status filter
            page_number: One-based page number (must be >= 1)
            page_size: Page size (must be >= 1)

        Returns:
            Records at offset ``(page_number - 1) * page_size``

        Raises:
            InvalidArgumentError: If the paging arguments are invalid
        """
        pass

    @abstractmethod
    def find_unresolved_by_description(
        self, description: str, host_name: str | None = None
    ) -> list[ErrorRecord]:
        """Find unresolved records with exactly this description (and host, if given)."""
        pass

    @abstractmethod
    def insert(self, record: ErrorRecord) -> int:
        """Insert a new error record.

        The stored copy is always unresolved and gets store-assigned
        timestamps and ID, whatever the input says.

        Args:
            record: Record to insert; must not have an id

        Returns:
            ID of the new record

        Raises:
            InvalidArgumentError: If the record already has an id
        """
        pass

    @abstractmethod
    def increment_count(self, record_id: int) -> None:
        """Add one occurrence to a record and refresh its updated_at.

        Raises:
            ErrorRecordNotFoundError: If no record has this id
        """
        pass

    @abstractmethod
    def insert_or_increment_count(self, record: ErrorRecord) -> int:
        """Insert the record, or count one more occurrence of a matching unresolved one.

        Two records match when they are unresolved and share description and
        host name. The lookup and the increment are separate operations, so
        concurrent callers may both insert.

        Args:
            record: Record describing the occurrence

        Returns:
            ID of the inserted or incremented record
        """
        pass

    @abstractmethod
    def resolve(self, record_id: int) -> ErrorRecord:
        """Mark a record resolved.

        Returns:
            The updated record

        Raises:
            ErrorRecordNotFoundError: If no record has this id
        """
        pass

    @abstractmethod
    def resolve_all_unresolved(self) -> int:
        """Resolve every unresolved record.

        Returns:
            Number of records changed
        """
        pass

    @abstractmethod
    def delete_before(self, status: ErrorStatus, cutoff: datetime) -> int:
        """Delete records with the given status created before ``cutoff``.

        Args:
            status: RESOLVED or UNRESOLVED
            cutoff: Exclusive upper bound on created_at

        Returns:
            Number of records deleted

        Raises:
            InvalidArgumentError: If status is ALL
        """
        pass

    def close(self) -> None:
        """Release backend resources. The default does nothing."""
        pass
