"""
Employer Deposit Engine - Employer-side severance-fund deposit.

The employer deposits a percentage of a salaried employee's gross pay
(8% by default) into a fund linked to the employee.  The amount is
reported on the payslip but is NOT deducted from the employee's pay.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_kernel.domain.money import ZERO, percent_of, round_money
from payroll_kernel.exceptions import ConfigurationError


def compute_employer_deposit(gross_pay: Decimal, deposit_percent: Decimal) -> Decimal:
    """``deposit_percent`` of ``gross_pay``, rounded to cents."""
    if gross_pay < ZERO:
        raise ConfigurationError(f"cannot be negative: {gross_pay}", field="gross_pay")
    if deposit_percent < ZERO:
        raise ConfigurationError(
            f"cannot be negative: {deposit_percent}", field="employer_deposit_percent"
        )
    return round_money(percent_of(gross_pay, deposit_percent))
