"""
Tests for the Hours & Premiums engine.

Covers:
- Hourly rate from monthly salary
- Overtime pay with premium
- Night-shift pay under both named policies
- Negative hours and invalid configuration
"""

from decimal import Decimal

import pytest

from payroll_engines.premiums import (
    DEFAULT_HOURS_PER_MONTH,
    NightShiftPolicy,
    hourly_rate,
    night_shift_pay,
    overtime_pay,
    price_hours,
)
from payroll_kernel.exceptions import ConfigurationError, ValidationError


class TestHourlyRate:
    """Tests for hourly_rate."""

    def test_default_hours_per_month(self):
        assert DEFAULT_HOURS_PER_MONTH == Decimal("220")
        assert hourly_rate(Decimal("2200.00")) == Decimal("10")

    def test_configurable_hours_per_month(self):
        assert hourly_rate(Decimal("2000.00"), Decimal("200")) == Decimal("10")

    def test_rate_is_not_rounded(self):
        rate = hourly_rate(Decimal("3000.00"))
        assert rate != rate.quantize(Decimal("0.01"))
        assert rate.quantize(Decimal("0.0001")) == Decimal("13.6364")

    def test_zero_hours_per_month_rejected(self):
        with pytest.raises(ConfigurationError):
            hourly_rate(Decimal("3000.00"), Decimal("0"))

    def test_negative_salary_rejected(self):
        with pytest.raises(ConfigurationError):
            hourly_rate(Decimal("-1.00"))


class TestOvertimePay:
    """Tests for overtime_pay: rate * hours * (1 + p/100)."""

    def test_fifty_percent_premium(self):
        assert overtime_pay(Decimal("10"), Decimal("10"), Decimal("50")) == Decimal("150.00")

    def test_hundred_percent_premium(self):
        assert overtime_pay(Decimal("10"), Decimal("4"), Decimal("100")) == Decimal("80.00")

    def test_rounded_half_up(self):
        """13.6363... * 10 * 1.5 = 204.5454... -> 204.55."""
        rate = hourly_rate(Decimal("3000.00"))
        assert overtime_pay(rate, Decimal("10"), Decimal("50")) == Decimal("204.55")

    def test_fractional_hours(self):
        assert overtime_pay(Decimal("10"), Decimal("2.5"), Decimal("50")) == Decimal("37.50")

    def test_zero_hours(self):
        assert overtime_pay(Decimal("10"), Decimal("0"), Decimal("50")) == Decimal("0.00")

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            overtime_pay(Decimal("10"), Decimal("-1"), Decimal("50"))
        assert exc_info.value.field == "overtime_hours"

    def test_negative_premium_rejected(self):
        with pytest.raises(ConfigurationError):
            overtime_pay(Decimal("10"), Decimal("1"), Decimal("-50"))


class TestNightShiftPay:
    """Tests pinning both night-shift policies."""

    def test_premium_only_is_default(self):
        """Night hours are already in base salary: only the 20% premium is added."""
        assert night_shift_pay(Decimal("10"), Decimal("10"), Decimal("20")) == Decimal("20.00")

    def test_premium_only_explicit(self):
        pay = night_shift_pay(
            Decimal("10"), Decimal("10"), Decimal("20"), NightShiftPolicy.PREMIUM_ONLY
        )
        assert pay == Decimal("20.00")

    def test_full_pay_with_premium(self):
        pay = night_shift_pay(
            Decimal("10"), Decimal("10"), Decimal("20"), NightShiftPolicy.FULL_PAY_WITH_PREMIUM
        )
        assert pay == Decimal("120.00")

    def test_rounded_half_up(self):
        rate = hourly_rate(Decimal("3000.00"))
        assert night_shift_pay(rate, Decimal("10"), Decimal("20")) == Decimal("27.27")

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            night_shift_pay(Decimal("10"), Decimal("-0.5"), Decimal("20"))
        assert exc_info.value.field == "night_shift_hours"


class TestPriceHours:
    """Tests for price_hours composition."""

    def test_prices_both_kinds_of_hours(self):
        pricing = price_hours(
            base_salary=Decimal("2200.00"),
            overtime_hours=Decimal("10"),
            night_shift_hours=Decimal("10"),
            hours_per_month=Decimal("220"),
            overtime_premium_percent=Decimal("50"),
            night_shift_premium_percent=Decimal("20"),
        )

        assert pricing.hourly_rate == Decimal("10")
        assert pricing.overtime_pay == Decimal("150.00")
        assert pricing.night_shift_pay == Decimal("20.00")
        assert pricing.premium_total == Decimal("170.00")

    def test_policy_passed_through(self):
        pricing = price_hours(
            base_salary=Decimal("2200.00"),
            overtime_hours=Decimal("0"),
            night_shift_hours=Decimal("10"),
            hours_per_month=Decimal("220"),
            overtime_premium_percent=Decimal("50"),
            night_shift_premium_percent=Decimal("20"),
            night_shift_policy=NightShiftPolicy.FULL_PAY_WITH_PREMIUM,
        )
        assert pricing.night_shift_pay == Decimal("120.00")
