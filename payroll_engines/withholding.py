"""
Withholding Engine - Progressive income-tax withholding.

Pure function with no I/O.  The taxable base is gross pay minus the
contribution minus the per-dependent deduction, floored at 0.  The matched
bracket is applied marginal-with-deduction style: ``base * rate -
deduction``, where the deduction encodes the benefit of the lower brackets.

Usage:
    from decimal import Decimal
    from payroll_engines.withholding import compute_withholding

    compute_withholding(
        gross_pay=Decimal("3000.00"),
        contribution=Decimal("360.00"),
        dependents=0,
        per_dependent_deduction=Decimal("189.59"),
        table=withholding_table,
    )
    # Decimal("28.56"): 2640.00 * 7.5% - 169.44
"""

from __future__ import annotations

from decimal import Decimal

from payroll_engines.brackets import BracketPolicy, BracketTable, bracket_tax
from payroll_kernel.domain.money import ZERO, round_money
from payroll_kernel.exceptions import ConfigurationError, ValidationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.withholding")


def taxable_base(
    gross_pay: Decimal,
    contribution: Decimal,
    dependents: int,
    per_dependent_deduction: Decimal,
) -> Decimal:
    """
    ``gross - contribution - dependents * per_dependent_deduction``, floored at 0.

    Raises:
        ValidationError: If ``dependents`` is negative.
        ConfigurationError: If a monetary input is negative.
    """
    if dependents < 0:
        raise ValidationError("dependents", f"cannot be negative: {dependents}")
    if gross_pay < ZERO:
        raise ConfigurationError(f"cannot be negative: {gross_pay}", field="gross_pay")
    if contribution < ZERO:
        raise ConfigurationError(f"cannot be negative: {contribution}", field="contribution")
    if per_dependent_deduction < ZERO:
        raise ConfigurationError(
            f"cannot be negative: {per_dependent_deduction}",
            field="per_dependent_deduction",
        )
    base = gross_pay - contribution - dependents * per_dependent_deduction
    return max(base, ZERO)


def compute_withholding(
    gross_pay: Decimal,
    contribution: Decimal,
    dependents: int,
    per_dependent_deduction: Decimal,
    table: BracketTable,
) -> Decimal:
    """
    Compute income tax withheld.

    Postconditions:
        - Returns a non-negative ``Decimal`` quantized to 0.01 (ROUND_HALF_UP).
    """
    base = taxable_base(gross_pay, contribution, dependents, per_dependent_deduction)
    tax = bracket_tax(table, base, BracketPolicy.MARGINAL_WITH_DEDUCTION)
    withholding = max(round_money(tax), ZERO)

    logger.debug(
        "withholding_computed",
        extra={
            "gross_pay": str(gross_pay),
            "contribution": str(contribution),
            "dependents": dependents,
            "taxable_base": str(base),
            "withholding": str(withholding),
        },
    )
    return withholding
