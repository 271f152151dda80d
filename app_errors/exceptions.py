# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions raised by error stores and error record factories."""


class ErrorStoreError(Exception):
    """Base exception for error store errors."""
    pass


class InvalidArgumentError(ErrorStoreError, ValueError):
    """Raised when a caller passes an invalid argument (blank description, bad paging, etc.)."""
    pass


class ErrorRecordNotFoundError(ErrorStoreError):
    """Raised when an update targets an error record that does not exist."""

    def __init__(self, message: str, record_id: int | None = None):
        """Initialize ErrorRecordNotFoundError with context.

        Args:
            message: Error message
            record_id: ID of the missing error record (optional)
        """
        super().__init__(message)
        self.record_id = record_id


class ErrorStoreBackendError(ErrorStoreError):
    """Raised when the underlying database driver fails.

    The original driver exception is always chained as ``__cause__``.
    """
    pass


class HostIdentityNotConfiguredError(ErrorStoreError):
    """Raised when a record factory needs the process host identity before it was set."""
    pass
