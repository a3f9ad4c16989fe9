"""
Hours & Premiums Engine - Hourly rate, overtime and night-shift pay.

Pure functions with no I/O.  The monthly base salary is converted into an
hourly rate by dividing by the standard hours per month (220 by default,
supplied by configuration).  Overtime hours are paid in full plus the
overtime premium.  Night-shift hours are priced according to a named
``NightShiftPolicy``:

    PREMIUM_ONLY           rate * hours * premium%        (default)
    FULL_PAY_WITH_PREMIUM  rate * hours * (1 + premium%)

PREMIUM_ONLY assumes night hours are already paid through the base salary,
so only the night premium is added on top.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.money import HUNDRED, ZERO, round_money
from payroll_kernel.exceptions import ConfigurationError, ValidationError

DEFAULT_HOURS_PER_MONTH = Decimal("220")


class NightShiftPolicy(str, Enum):
    """How night-shift hours are priced."""

    PREMIUM_ONLY = "premium_only"
    FULL_PAY_WITH_PREMIUM = "full_pay_with_premium"


def _check_hours(hours: Decimal, field: str) -> None:
    if hours < ZERO:
        raise ValidationError(field, f"cannot be negative: {hours}")


def _check_percent(percent: Decimal, field: str) -> None:
    if percent < ZERO:
        raise ConfigurationError(f"cannot be negative: {percent}", field=field)


def hourly_rate(
    monthly_salary: Decimal,
    hours_per_month: Decimal = DEFAULT_HOURS_PER_MONTH,
) -> Decimal:
    """
    Monthly salary divided by standard hours per month.

    The rate is left unrounded; the pay amounts derived from it are rounded.
    """
    if monthly_salary < ZERO:
        raise ConfigurationError(f"cannot be negative: {monthly_salary}", field="monthly_salary")
    if hours_per_month <= ZERO:
        raise ConfigurationError(
            f"must be positive: {hours_per_month}", field="hours_per_month"
        )
    return monthly_salary / hours_per_month


def overtime_pay(
    rate: Decimal,
    overtime_hours: Decimal,
    overtime_premium_percent: Decimal,
) -> Decimal:
    """``rate * hours * (1 + premium/100)``, rounded to cents."""
    _check_hours(overtime_hours, "overtime_hours")
    _check_percent(overtime_premium_percent, "overtime_premium_percent")
    multiplier = 1 + overtime_premium_percent / HUNDRED
    return round_money(rate * overtime_hours * multiplier)


def night_shift_pay(
    rate: Decimal,
    night_hours: Decimal,
    night_premium_percent: Decimal,
    policy: NightShiftPolicy = NightShiftPolicy.PREMIUM_ONLY,
) -> Decimal:
    """Night-shift pay under ``policy``, rounded to cents."""
    _check_hours(night_hours, "night_shift_hours")
    _check_percent(night_premium_percent, "night_shift_premium_percent")
    premium = night_premium_percent / HUNDRED
    if policy is NightShiftPolicy.FULL_PAY_WITH_PREMIUM:
        return round_money(rate * night_hours * (1 + premium))
    return round_money(rate * night_hours * premium)


@dataclass(frozen=True)
class HoursPricing:
    """Hourly rate and premium pay for one employee-month."""

    hourly_rate: Decimal
    overtime_pay: Decimal
    night_shift_pay: Decimal

    @property
    def premium_total(self) -> Decimal:
        return self.overtime_pay + self.night_shift_pay


def price_hours(
    base_salary: Decimal,
    overtime_hours: Decimal,
    night_shift_hours: Decimal,
    hours_per_month: Decimal,
    overtime_premium_percent: Decimal,
    night_shift_premium_percent: Decimal,
    night_shift_policy: NightShiftPolicy = NightShiftPolicy.PREMIUM_ONLY,
) -> HoursPricing:
    """Price a month's overtime and night-shift hours from the base salary."""
    rate = hourly_rate(base_salary, hours_per_month)
    return HoursPricing(
        hourly_rate=rate,
        overtime_pay=overtime_pay(rate, overtime_hours, overtime_premium_percent),
        night_shift_pay=night_shift_pay(
            rate, night_shift_hours, night_shift_premium_percent, night_shift_policy
        ),
    )
