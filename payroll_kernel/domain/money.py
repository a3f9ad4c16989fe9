"""
Decimal helpers for payroll amounts.

Responsibility:
    Single-currency monetary arithmetic.  Every amount, rate and hour count
    in the engine is a ``Decimal``; floats are rejected at the boundary so
    that additive payslip totals never drift.

Invariants enforced:
    - ``to_decimal`` never accepts ``float``.
    - ``round_money`` quantizes to 2 places with ROUND_HALF_UP.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | str | int, field: str = "amount") -> Decimal:
    """
    Convert a value to ``Decimal``.

    Raises:
        TypeError: If ``value`` is a float (or bool).
        ValueError: If ``value`` is not a finite number.
    """
    if isinstance(value, (float, bool)):
        raise TypeError(f"{field} must be Decimal, str or int, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid {field}: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid {field}: {value!r}")
    return result


def round_money(amount: Decimal) -> Decimal:
    """Quantize to cents, rounding half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """``percent`` percent of ``amount`` (unrounded)."""
    return amount * percent / HUNDRED
