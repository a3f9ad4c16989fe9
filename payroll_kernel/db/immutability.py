"""
ORM-Level Immutability Enforcement for stored payslips.

A payslip is immutable once created.  Re-running payroll for the same
(employee, month, year) supersedes the prior payslip by deleting the old
row and inserting a new one inside one transaction; the row itself is
never UPDATEd.  This module registers a ``before_update`` listener that
rejects any in-place modification before the SQL reaches the database:

    session.flush()
         |
         v
    [before_update event] --> _check_payslip_immutability() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)
"""

from sqlalchemy import event

from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_payslip_immutability(mapper, connection, target):
    """Prevent any updates to stored payslip rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Payslip",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="Payslip",
        entity_id=str(target.id),
        reason="Payslips are superseded by replacement, never modified",
    )


def register_immutability_listeners() -> None:
    """Register the payslip immutability listener (idempotent)."""
    from payroll_services.orm import PayslipModel

    if not event.contains(PayslipModel, "before_update", _check_payslip_immutability):
        event.listen(PayslipModel, "before_update", _check_payslip_immutability)


def unregister_immutability_listeners() -> None:
    """Remove the payslip immutability listener. FOR TESTING ONLY."""
    from payroll_services.orm import PayslipModel

    if event.contains(PayslipModel, "before_update", _check_payslip_immutability):
        event.remove(PayslipModel, "before_update", _check_payslip_immutability)
