# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Log-and-save helpers for reporting application errors from service code.

Saving an error must never break the operation that hit it, so these
helpers log and swallow any failure from the store.
"""

import logging

from .error_store import ErrorStore
from .logger import Logger
from .models import HostIdentity, new_unresolved_error

logger = logging.getLogger(__name__)


def _format_description(message: str, args: tuple) -> str:
    """Fill the placeholders in ``message``, keeping it unformatted if the args do not fit."""
    if not args:
        return message
    try:
        return message % args
    except (TypeError, ValueError, KeyError):
        logger.warning("Could not format application error description [%s] with args %r", message, args)
        return message


def log_and_save_error(
    store: ErrorStore,
    service_logger: Logger,
    message: str,
    *args: object,
    exc: BaseException | None = None,
    host: HostIdentity | None = None,
) -> int | None:
    """Log an error and record it as an unresolved application error.

    Args:
        store: Store to save the error in
        service_logger: Logger to write the error message to
        message: Error description; %-style placeholders are filled from ``args``,
            or left unfilled when the args do not match them
        *args: Values for the placeholders in ``message``
        exc: Exception that caused the error, if any
        host: Host identity; defaults to the process host identity

    Returns:
        ID of the inserted or incremented record, or None if saving failed
    """
    description = _format_description(message, args)

    try:
        if exc is not None:
            service_logger.error(
                description,
                exception_type=type(exc).__name__,
                exception_message=str(exc),
            )
        else:
            service_logger.error(description)

        record = new_unresolved_error(description, exc, host=host)
        return store.insert_or_increment_count(record)
    except Exception as save_error:
        if exc is not None:
            logger.error(
                "Error saving application error with description [%s] and %s exception having message: %s",
                description,
                type(exc).__name__,
                exc,
                exc_info=save_error,
            )
        else:
            logger.error(
                "Error saving application error with description [%s]",
                description,
                exc_info=save_error,
            )
        return None
