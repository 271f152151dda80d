# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Test helpers shared across app_errors tests."""

from dataclasses import replace

from app_errors import HostIdentity, InMemoryErrorStore, SqlAlchemyErrorStore
from app_errors.dbapi_error_store import format_timestamp
from app_errors.schema import TABLE_NAME, application_errors

HOST = HostIdentity(host_name="web-1", ip_address="10.0.0.5", port=8080)
OTHER_HOST = HostIdentity(host_name="web-2", ip_address="10.0.0.6", port=8080)


def set_timestamps(error_store, record_id, created_at, updated_at=None):
    """Overwrite a stored record's timestamps, bypassing the store API."""
    updated_at = updated_at or created_at

    if isinstance(error_store, InMemoryErrorStore):
        existing = error_store.errors[record_id]
        error_store.errors[record_id] = replace(existing, created_at=created_at, updated_at=updated_at)
    elif isinstance(error_store, SqlAlchemyErrorStore):
        with error_store.engine.begin() as conn:
            conn.execute(
                application_errors.update()
                .where(application_errors.c.id == record_id)
                .values(created_at=created_at, updated_at=updated_at)
            )
    else:
        conn = error_store.connection_factory()
        try:
            conn.execute(
                f"update {TABLE_NAME} set created_at = ?, updated_at = ? where id = ?",
                (format_timestamp(created_at), format_timestamp(updated_at), record_id),
            )
            conn.commit()
        finally:
            conn.close()
