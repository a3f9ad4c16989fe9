"""
Tests for the Contribution engine.

Covers:
- Flat-rate-at-bracket application on gross pay
- Ceiling clamp
- Rounding and input validation
"""

from decimal import Decimal

import pytest

from payroll_engines.brackets import BracketTable
from payroll_engines.contribution import compute_contribution, contribution_base
from payroll_kernel.exceptions import ConfigurationError

CEILING = Decimal("7786.02")


class TestComputeContribution:
    """Tests for compute_contribution with the 2025 table."""

    def setup_method(self):
        self.table = BracketTable.from_ranges(
            [
                {"lower_bound": "0", "upper_bound": "1412.00", "rate": "7.5"},
                {"lower_bound": "1412.01", "upper_bound": "2666.68", "rate": "9"},
                {"lower_bound": "2666.69", "upper_bound": "4000.03", "rate": "12"},
                {"lower_bound": "4000.04", "upper_bound": None, "rate": "14"},
            ],
            name="contribution",
        )

    @pytest.mark.parametrize(
        "gross, expected",
        [
            ("0", "0.00"),
            ("1000.00", "75.00"),
            ("1412.00", "105.90"),
            ("1412.01", "127.08"),
            ("2000.00", "180.00"),
            ("3000.00", "360.00"),
            ("5000.00", "700.00"),
            ("7786.02", "1090.04"),
        ],
    )
    def test_flat_rate_on_whole_gross(self, gross, expected):
        assert compute_contribution(Decimal(gross), self.table, CEILING) == Decimal(expected)

    def test_gross_above_ceiling_is_clamped(self):
        """9000.00 is charged on 7786.02, not on 9000.00."""
        contribution = compute_contribution(Decimal("9000.00"), self.table, CEILING)

        assert contribution == Decimal("1090.04")
        assert contribution != Decimal("1260.00")

    def test_constant_above_ceiling(self):
        amounts = ["7786.03", "8000.00", "15000.00", "1000000.00"]
        results = {compute_contribution(Decimal(a), self.table, CEILING) for a in amounts}
        assert results == {Decimal("1090.04")}

    def test_result_quantized_to_cents(self):
        contribution = compute_contribution(Decimal("1412.01"), self.table, CEILING)
        assert contribution.as_tuple().exponent == -2

    def test_half_up_rounding(self):
        """100.10 * 7.5% = 7.5075 -> 7.51."""
        assert compute_contribution(Decimal("100.10"), self.table, CEILING) == Decimal("7.51")

    def test_sub_cent_gross_between_ranges(self):
        """1412.005 is past 1412.00 but below 1412.01: 7.5% -> 105.900375 -> 105.90."""
        assert compute_contribution(Decimal("1412.005"), self.table, CEILING) == Decimal("105.90")

    def test_negative_gross_rejected(self):
        with pytest.raises(ConfigurationError):
            compute_contribution(Decimal("-1.00"), self.table, CEILING)

    def test_negative_ceiling_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            compute_contribution(Decimal("100.00"), self.table, Decimal("-1"))
        assert exc_info.value.field == "contribution_ceiling"

    def test_zero_ceiling_means_no_contribution(self):
        assert compute_contribution(Decimal("3000.00"), self.table, Decimal("0")) == Decimal("0")

    def test_logs_capped_flag(self, captured_logs):
        compute_contribution(Decimal("9000.00"), self.table, CEILING)

        record = next(r for r in captured_logs() if r["message"] == "contribution_computed")
        assert record["capped"] is True
        assert record["contribution_base"] == "7786.02"


class TestContributionBase:
    def test_below_ceiling_unchanged(self):
        assert contribution_base(Decimal("3000.00"), CEILING) == Decimal("3000.00")

    def test_above_ceiling_clamped(self):
        assert contribution_base(Decimal("9000.00"), CEILING) == CEILING
