"""
Payroll service domain types -- frozen dataclasses and enums.

Contract:
    Pure value objects exchanged between the repositories, the payslip
    calculator, the orchestrator and the payslip stores.  No I/O, no ORM
    dependency (``payroll_services.orm`` converts to and from these).

Invariants enforced:
    - All types are frozen; a ``PayslipResult`` is immutable once created.
    - Monetary fields are ``Decimal`` quantized to cents by the calculator.
    - ``PayrollRunResult`` partitions the roster: every active employee
      appears in exactly one of succeeded / failed / not_processed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from payroll_engines.benefits import BenefitLine
from payroll_kernel.domain.money import ZERO


class ContractType(str, Enum):
    """Employment classification."""

    SALARIED = "salaried"  # CLT: statutory contribution and withholding apply
    CONTRACTOR = "contractor"  # PJ: paid gross, no payroll withholding


class ProcessingState(str, Enum):
    """Lifecycle of the payslip for one (employee, month, year)."""

    NOT_PROCESSED = "not_processed"
    PROCESSED = "processed"
    SUPERSEDED = "superseded"  # Re-run replaced an earlier payslip


@dataclass(frozen=True)
class EmployeeContractInfo:
    """
    Contract data owned by the worker record.

    Read-only to the engine.  Field validation happens when the payslip is
    calculated so that a malformed record fails that employee only.
    """

    employee_id: str
    contract_type: ContractType
    base_salary: Decimal
    dependents: int = 0
    employee_name: str = ""


@dataclass(frozen=True)
class TimesheetSummary:
    """Overtime and night-shift hours of one employee for one month."""

    overtime_hours: Decimal = ZERO
    night_shift_hours: Decimal = ZERO

    @classmethod
    def zero(cls) -> TimesheetSummary:
        return cls(overtime_hours=ZERO, night_shift_hours=ZERO)


@dataclass(frozen=True)
class NegativeNetPayWarning:
    """
    Deductions exceeded gross pay and net pay was floored at zero.

    Non-fatal: attached to the successful payslip.
    """

    employee_id: str
    unfloored_net_pay: Decimal
    code: str = "NEGATIVE_NET_PAY"

    @property
    def message(self) -> str:
        return (
            f"Deductions exceed gross pay for employee {self.employee_id}; "
            f"net pay {self.unfloored_net_pay} floored at 0"
        )


@dataclass(frozen=True)
class PayslipResult:
    """Itemized payroll result for one employee and one month/year."""

    employee_id: str
    month: int
    year: int
    contract_type: ContractType
    base_salary: Decimal
    overtime_pay: Decimal
    night_shift_pay: Decimal
    gross_pay: Decimal
    contribution_withheld: Decimal
    income_tax_withheld: Decimal
    benefit_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    generated_at: datetime
    employee_name: str = ""
    overtime_hours: Decimal = ZERO
    night_shift_hours: Decimal = ZERO
    benefit_lines: tuple[BenefitLine, ...] = ()
    employer_deposit: Decimal = ZERO
    warnings: tuple[NegativeNetPayWarning, ...] = ()

    @property
    def key(self) -> tuple[str, int, int]:
        """Store key: one payslip per (employee, month, year)."""
        return (self.employee_id, self.month, self.year)

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class EmployeeFailure:
    """One employee whose payslip could not be produced in a batch."""

    employee_id: str
    reason: str
    code: str


@dataclass(frozen=True)
class PayrollRunResult:
    """Outcome of ``process_payroll`` for one period."""

    run_id: str
    month: int
    year: int
    succeeded: tuple[PayslipResult, ...] = ()
    failed: tuple[EmployeeFailure, ...] = ()
    not_processed: tuple[str, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def total_employees(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.not_processed)

    @property
    def is_complete(self) -> bool:
        """True when every employee was attempted and none failed."""
        return not self.failed and not self.not_processed

    @property
    def warnings(self) -> tuple[NegativeNetPayWarning, ...]:
        return tuple(w for payslip in self.succeeded for w in payslip.warnings)

    def payslip_for(self, employee_id: str) -> PayslipResult | None:
        for payslip in self.succeeded:
            if payslip.employee_id == employee_id:
                return payslip
        return None

    def failure_for(self, employee_id: str) -> EmployeeFailure | None:
        for failure in self.failed:
            if failure.employee_id == employee_id:
                return failure
        return None
