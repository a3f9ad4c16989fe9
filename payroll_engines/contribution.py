"""
Contribution Engine - Mandatory social-security-style contribution.

Pure function with no I/O.  Gross pay is clamped to the contribution
ceiling, then the rate of the bracket containing the clamped amount is
applied to the WHOLE clamped amount (flat-rate-at-bracket, not marginal).

Usage:
    from decimal import Decimal
    from payroll_engines.contribution import compute_contribution

    compute_contribution(Decimal("3000.00"), table, ceiling=Decimal("7786.02"))
    # Decimal("360.00") with a 12% bracket covering 3000.00
"""

from __future__ import annotations

from decimal import Decimal

from payroll_engines.brackets import BracketPolicy, BracketTable, bracket_tax
from payroll_kernel.domain.money import ZERO, round_money
from payroll_kernel.exceptions import ConfigurationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.contribution")


def contribution_base(gross_pay: Decimal, ceiling: Decimal) -> Decimal:
    """Gross pay clamped to the contribution ceiling."""
    return min(gross_pay, ceiling)


def compute_contribution(
    gross_pay: Decimal,
    table: BracketTable,
    ceiling: Decimal,
) -> Decimal:
    """
    Compute the contribution withheld from ``gross_pay``.

    Preconditions:
        - ``gross_pay`` >= 0 and ``ceiling`` >= 0.
    Postconditions:
        - Returns a non-negative ``Decimal`` quantized to 0.01 (ROUND_HALF_UP).
        - Constant for every ``gross_pay`` above ``ceiling``.

    Raises:
        ConfigurationError: On negative gross pay or ceiling, or a table
            that does not cover the clamped amount.
    """
    if gross_pay < ZERO:
        raise ConfigurationError(f"cannot be negative: {gross_pay}", field="gross_pay")
    if ceiling < ZERO:
        raise ConfigurationError(f"cannot be negative: {ceiling}", field="contribution_ceiling")

    base = contribution_base(gross_pay, ceiling)
    contribution = max(round_money(bracket_tax(table, base, BracketPolicy.FLAT_RATE_AT_BRACKET)), ZERO)

    logger.debug(
        "contribution_computed",
        extra={
            "gross_pay": str(gross_pay),
            "contribution_base": str(base),
            "capped": base < gross_pay,
            "contribution": str(contribution),
        },
    )
    return contribution
