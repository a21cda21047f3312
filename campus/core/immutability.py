"""Append-only enforcement for history and audit records using SQLAlchemy events."""

import logging
from datetime import UTC, datetime

from sqlalchemy import event

from campus.core.exceptions import AppException

logger = logging.getLogger(__name__)


class ImmutabilityViolationError(AppException):
    """Raised when attempting to modify an append-only record."""

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            detail=(
                f"Immutability violation: Cannot {operation} {model_name} record {record_id}. "
                "History and audit records are append-only."
            )
        )


def _log_immutability_violation(model_name: str, operation: str, record_id: str) -> None:
    """Log immutability violation for audit purposes."""
    logger.error(
        f"IMMUTABILITY_VIOLATION: Attempted to {operation} {model_name} "
        f"record_id={record_id} at {datetime.now(UTC).isoformat()}"
    )


def _guard(operation: str):
    def listener(mapper, connection, target):
        model_name = type(target).__name__
        _log_immutability_violation(model_name, operation, str(target.id))
        raise ImmutabilityViolationError(model_name, operation, str(target.id))

    return listener


_prevent_update = _guard("UPDATE")
_prevent_delete = _guard("DELETE")


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for append-only tables.

    Safe to call more than once; listeners are attached a single time.
    """
    from campus.models.admin import AuditLog
    from campus.models.booking import BookingStatusHistory

    for model in (BookingStatusHistory, AuditLog):
        if not event.contains(model, "before_update", _prevent_update):
            event.listen(model, "before_update", _prevent_update)
        if not event.contains(model, "before_delete", _prevent_delete):
            event.listen(model, "before_delete", _prevent_delete)

    logger.info("Immutability enforcement registered for status history and audit log")
