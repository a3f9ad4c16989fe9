"""
Benefits Engine - Elective deductions from gross pay.

Pure functions with no I/O.  The caller passes only ACTIVE elections;
this module does not filter by status.

    FIXED_AMOUNT       value
    PERCENT_OF_GROSS   min(value% * gross, cap% * gross)   when cap is set
                       value% * gross                      otherwise

Each election is rounded to cents (ROUND_HALF_UP) before summing so that
the itemized lines always add up to the aggregate.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.money import ZERO, percent_of, round_money, to_decimal
from payroll_kernel.exceptions import ConfigurationError, ValidationError


class BenefitKind(str, Enum):
    """How a benefit election is valued."""

    FIXED_AMOUNT = "fixed_amount"
    PERCENT_OF_GROSS = "percent_of_gross"


@dataclass(frozen=True)
class BenefitElection:
    """
    One active benefit election of an employee.

    ``value`` is a currency amount for FIXED_AMOUNT and a percentage for
    PERCENT_OF_GROSS.  ``cap`` is a percentage of gross and only applies to
    PERCENT_OF_GROSS.
    """

    kind: BenefitKind
    value: Decimal
    cap: Decimal | None = None
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", BenefitKind(self.kind))
        object.__setattr__(self, "value", to_decimal(self.value, "value"))
        if self.cap is not None:
            object.__setattr__(self, "cap", to_decimal(self.cap, "cap"))
        if self.value < ZERO:
            raise ValidationError("benefit value", f"cannot be negative: {self.value}")
        if self.cap is not None and self.cap < ZERO:
            raise ValidationError("benefit cap", f"cannot be negative: {self.cap}")

    @classmethod
    def transport_allowance(cls, percent: Decimal, cap_percent: Decimal) -> BenefitElection:
        """Transport allowance: percent of gross capped at a statutory percent."""
        return cls(
            kind=BenefitKind.PERCENT_OF_GROSS,
            value=percent,
            cap=cap_percent,
            name="transport_allowance",
        )


@dataclass(frozen=True)
class BenefitLine:
    """Deduction amount of one election on one payslip."""

    name: str
    kind: BenefitKind
    amount: Decimal
    capped: bool = False


def benefit_amount(election: BenefitElection, gross_pay: Decimal) -> BenefitLine:
    """Deduction for a single election, rounded to cents."""
    if election.kind is BenefitKind.FIXED_AMOUNT:
        return BenefitLine(
            name=election.name,
            kind=election.kind,
            amount=round_money(election.value),
        )

    amount = percent_of(gross_pay, election.value)
    capped = False
    if election.cap is not None:
        ceiling = percent_of(gross_pay, election.cap)
        if ceiling < amount:
            amount = ceiling
            capped = True
    return BenefitLine(
        name=election.name,
        kind=election.kind,
        amount=round_money(amount),
        capped=capped,
    )


def itemize_benefits(
    elections: Sequence[BenefitElection],
    gross_pay: Decimal,
) -> tuple[BenefitLine, ...]:
    """Per-election deduction lines, in election order."""
    if gross_pay < ZERO:
        raise ConfigurationError(f"cannot be negative: {gross_pay}", field="gross_pay")
    return tuple(benefit_amount(election, gross_pay) for election in elections)


def aggregate_benefits(
    elections: Sequence[BenefitElection],
    gross_pay: Decimal,
) -> Decimal:
    """Total benefit deductions for ``elections`` against ``gross_pay``."""
    return sum(
        (line.amount for line in itemize_benefits(elections, gross_pay)),
        ZERO,
    )
