# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Error record data model, host identity, and record factories.

Records can be built directly (no validation; the caller is responsible for
every field) or through the ``new_*_error`` factories, which validate their
inputs and stamp creation time, occurrence count, and host information.

Factories called without an explicit ``host`` read the process-wide host
identity, which must be set once at startup with :func:`set_host_identity`.
"""

from __future__ import annotations

import threading
import traceback
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import HostIdentityNotConfiguredError, InvalidArgumentError

if TYPE_CHECKING:
    from .error_store import ErrorStore

MIN_PORT = 0
MAX_PORT = 65_535


def is_valid_port(port: int) -> bool:
    """Return True if ``port`` is within 0-65535."""
    return isinstance(port, int) and MIN_PORT <= port <= MAX_PORT


def _require_not_blank(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(message)
    return value


class ErrorStatus(str, Enum):
    """Resolution status filter used by counting, paging, and deletion."""

    ALL = "ALL"
    RESOLVED = "RESOLVED"
    UNRESOLVED = "UNRESOLVED"

    @classmethod
    def from_string(cls, value: str | None) -> "ErrorStatus":
        """Parse a status name, case-insensitively.

        Args:
            value: Status name; blank or None means ALL

        Returns:
            Matching ErrorStatus

        Raises:
            InvalidArgumentError: If the name is not a known status
        """
        if value is None or not value.strip():
            return cls.ALL

        try:
            return cls[value.strip().upper()]
        except KeyError as e:
            raise InvalidArgumentError(f"Unknown error status value: {value}") from e


class DataStoreType(str, Enum):
    """Whether a store is shared between service instances."""

    SHARED = "SHARED"
    NOT_SHARED = "NOT_SHARED"


@dataclass(frozen=True)
class HostIdentity:
    """Host name, IP address, and port identifying the reporting process."""

    host_name: str
    ip_address: str
    port: int

    def __post_init__(self):
        _require_not_blank(self.host_name, "host_name must not be blank")
        _require_not_blank(self.ip_address, "ip_address must not be blank")
        if not is_valid_port(self.port):
            raise InvalidArgumentError("port must be a valid port")


@dataclass(frozen=True)
class ErrorRecord:
    """An application error as persisted by an ErrorStore.

    ``id`` is None until the record has been stored. Instances are immutable;
    stores produce updated copies when the count or resolution changes.
    """

    description: str
    host_name: str
    ip_address: str
    port: int
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    num_times_occurred: int = 1
    exception_type: str | None = None
    exception_message: str | None = None
    exception_cause_type: str | None = None
    exception_cause_message: str | None = None
    stack_trace: str | None = None
    resolved: bool = False

    @property
    def created_at_millis(self) -> int | None:
        """Creation time in milliseconds since the epoch, or None."""
        return _epoch_millis(self.created_at)

    @property
    def updated_at_millis(self) -> int | None:
        """Last update time in milliseconds since the epoch, or None."""
        return _epoch_millis(self.updated_at)

    def with_id(self, record_id: int) -> "ErrorRecord":
        """Return a copy of this record with the given id."""
        return replace(self, id=record_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (timestamps as ISO-8601 strings)."""
        data = asdict(self)
        for key in ("created_at", "updated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


def _epoch_millis(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


@dataclass
class ErrorRecordPage:
    """One page of error records plus the total count for the status filter."""

    items: list[ErrorRecord]
    total_count: int
    page_number: int
    page_size: int


def build_page(
    store: "ErrorStore", status: ErrorStatus, page_number: int, page_size: int
) -> ErrorRecordPage:
    """Fetch one page of records together with the total count.

    Args:
        store: Store to query
        status: Resolution status filter
        page_number: One-based page number
        page_size: Maximum number of items on the page

    Returns:
        ErrorRecordPage for the requested page
    """
    items = store.list_page(status, page_number, page_size)
    return ErrorRecordPage(
        items=items,
        total_count=store.count(status),
        page_number=page_number,
        page_size=page_size,
    )


# Process-wide host identity, set once at startup and cleared only in tests.
_host_identity: HostIdentity | None = None
_host_identity_lock = threading.Lock()


def set_host_identity(
    host: HostIdentity | str, ip_address: str | None = None, port: int | None = None
) -> HostIdentity:
    """Set the host identity used by factories called without a ``host``.

    Accepts either a HostIdentity or its three fields. Intended to be called
    once during service startup.

    Returns:
        The identity now in effect
    """
    global _host_identity

    if not isinstance(host, HostIdentity):
        host = HostIdentity(host_name=host, ip_address=ip_address, port=port)

    with _host_identity_lock:
        _host_identity = host
    return host


def get_host_identity() -> HostIdentity | None:
    """Return the process host identity, or None if it has not been set."""
    return _host_identity


def clear_host_identity() -> None:
    """Forget the process host identity (for test teardown)."""
    global _host_identity

    with _host_identity_lock:
        _host_identity = None


def _resolve_host(host: HostIdentity | None) -> HostIdentity:
    if host is not None:
        return host

    identity = _host_identity
    if identity is None:
        raise HostIdentityNotConfiguredError(
            "Host identity has not been set. Call set_host_identity() during startup, "
            "or pass host= explicitly."
        )
    return identity


def _exception_type_name(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _direct_cause(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def new_error(
    description: str,
    resolved: bool,
    exc: BaseException | None = None,
    *,
    host: HostIdentity | None = None,
) -> ErrorRecord:
    """Create a validated, not-yet-stored error record with one occurrence.

    Only the direct cause of ``exc`` is captured; deeper causes are ignored.

    Args:
        description: Description of the problem (must not be blank)
        resolved: Initial resolution flag
        exc: Exception that triggered the error, if any
        host: Host identity; defaults to the process host identity

    Returns:
        New ErrorRecord without an id

    Raises:
        InvalidArgumentError: If the description or host fields are invalid
        HostIdentityNotConfiguredError: If no host is given and none was set
    """
    _require_not_blank(description, "description must not be blank")
    identity = _resolve_host(host)

    now = datetime.now(timezone.utc)

    exception_type = exception_message = stack_trace = None
    cause_type = cause_message = None
    if exc is not None:
        exception_type = _exception_type_name(exc)
        exception_message = str(exc) or None
        stack_trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

        cause = _direct_cause(exc)
        if cause is not None:
            cause_type = _exception_type_name(cause)
            cause_message = str(cause) or None

    return ErrorRecord(
        created_at=now,
        updated_at=now,
        num_times_occurred=1,
        description=description,
        exception_type=exception_type,
        exception_message=exception_message,
        exception_cause_type=cause_type,
        exception_cause_message=cause_message,
        stack_trace=stack_trace,
        resolved=bool(resolved),
        host_name=identity.host_name,
        ip_address=identity.ip_address,
        port=identity.port,
    )


def new_unresolved_error(
    description: str, exc: BaseException | None = None, *, host: HostIdentity | None = None
) -> ErrorRecord:
    """Create a new unresolved error record. See :func:`new_error`."""
    return new_error(description, False, exc, host=host)


def new_resolved_error(
    description: str, exc: BaseException | None = None, *, host: HostIdentity | None = None
) -> ErrorRecord:
    """Create a new resolved error record. See :func:`new_error`."""
    return new_error(description, True, exc, host=host)
