"""
ORM-Level Immutability Enforcement for ledger records.

Top-up and deduction rows are the log that the company balance is
reconciled against.  Once flushed they must never change: a correction is a
new, opposite entry, never an edit.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners below intercept those events for the ledger models
and raise ImmutabilityViolationError, which aborts the flush and, through
``LedgerDatabase.session_scope()``, rolls back the whole transaction.

    session.flush()
         |
         v
    [before_update / before_delete] --> _reject_*() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if no listener raised)

Bulk ``update()`` / ``delete()`` statements bypass mapper events; the
service layer never issues them against ledger tables.
"""

from sqlalchemy import event

from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _reject(target, operation: str):
    entity_type = type(target).__name__
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "statement": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=f"Ledger records are append-only ({operation} rejected)",
    )


def _reject_ledger_update(mapper, connection, target):
    """Prevent any updates to ledger records."""
    _reject(target, "UPDATE")


def _reject_ledger_delete(mapper, connection, target):
    """Prevent deletion of ledger records."""
    _reject(target, "DELETE")


def _ledger_models():
    from payroll_kernel.models.ledger import DeductionRecord, TopUpRecord

    return (TopUpRecord, DeductionRecord)


def register_immutability_listeners():
    """
    Register the ledger immutability listeners.

    Idempotent.  Call during application initialization, after the models
    are importable and before any write is flushed.
    """
    for model in _ledger_models():
        if not event.contains(model, "before_update", _reject_ledger_update):
            event.listen(model, "before_update", _reject_ledger_update)
        if not event.contains(model, "before_delete", _reject_ledger_delete):
            event.listen(model, "before_delete", _reject_ledger_delete)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if it was never registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the ledger immutability listeners.

    WARNING: Only use this in tests.
    """
    for model in _ledger_models():
        _safe_remove_listener(model, "before_update", _reject_ledger_update)
        _safe_remove_listener(model, "before_delete", _reject_ledger_delete)
