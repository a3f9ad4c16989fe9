"""
Tests for the Withholding engine.

Covers:
- Taxable base (gross - contribution - dependents deduction)
- Marginal-with-deduction application and the zero floor
- Dependents validation
"""

from decimal import Decimal

import pytest

from payroll_engines.brackets import BracketTable
from payroll_engines.withholding import compute_withholding, taxable_base
from payroll_kernel.exceptions import ConfigurationError, ValidationError

PER_DEPENDENT = Decimal("189.59")


class TestTaxableBase:
    """Tests for the taxable base computation."""

    def test_gross_minus_contribution(self):
        assert taxable_base(Decimal("3000.00"), Decimal("360.00"), 0, PER_DEPENDENT) == Decimal(
            "2640.00"
        )

    def test_dependents_deducted(self):
        base = taxable_base(Decimal("3000.00"), Decimal("360.00"), 2, PER_DEPENDENT)
        assert base == Decimal("2260.82")

    def test_floored_at_zero(self):
        base = taxable_base(Decimal("500.00"), Decimal("37.50"), 5, PER_DEPENDENT)
        assert base == Decimal("0")

    def test_negative_dependents_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            taxable_base(Decimal("3000.00"), Decimal("360.00"), -1, PER_DEPENDENT)
        assert exc_info.value.field == "dependents"
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_negative_contribution_rejected(self):
        with pytest.raises(ConfigurationError):
            taxable_base(Decimal("3000.00"), Decimal("-1"), 0, PER_DEPENDENT)


class TestComputeWithholding:
    """Tests for compute_withholding with the 2025 table."""

    def setup_method(self):
        self.table = BracketTable.from_ranges(
            [
                {"lower_bound": "0", "upper_bound": "2259.20", "rate": "0", "deduction": "0"},
                {
                    "lower_bound": "2259.21",
                    "upper_bound": "2826.65",
                    "rate": "7.5",
                    "deduction": "169.44",
                },
                {
                    "lower_bound": "2826.66",
                    "upper_bound": "3751.05",
                    "rate": "15",
                    "deduction": "381.44",
                },
                {
                    "lower_bound": "3751.06",
                    "upper_bound": "4664.68",
                    "rate": "22.5",
                    "deduction": "662.77",
                },
                {"lower_bound": "4664.69", "upper_bound": None, "rate": "27.5", "deduction": "896.00"},
            ],
            name="withholding",
        )

    def _withhold(self, gross: str, contribution: str = "0", dependents: int = 0) -> Decimal:
        return compute_withholding(
            Decimal(gross), Decimal(contribution), dependents, PER_DEPENDENT, self.table
        )

    def test_scenario_taxable_2640(self):
        """2640.00 * 7.5% - 169.44 = 28.56."""
        assert self._withhold("3000.00", "360.00") == Decimal("28.56")

    @pytest.mark.parametrize(
        "taxable, expected",
        [
            ("0", "0.00"),
            ("2000.00", "0.00"),
            ("2259.20", "0.00"),
            ("3500.00", "143.56"),
            ("4000.00", "237.23"),
            ("5000.00", "479.00"),
        ],
    )
    def test_brackets(self, taxable, expected):
        assert self._withhold(taxable) == Decimal(expected)

    def test_dependents_lower_the_tax(self):
        """2 dependents: base 2260.82 -> 169.5615 - 169.44 = 0.12."""
        assert self._withhold("3000.00", "360.00", dependents=2) == Decimal("0.12")

    def test_tiny_positive_tax_rounds_to_zero(self):
        assert self._withhold("2259.21") == Decimal("0.00")

    def test_never_negative(self):
        assert self._withhold("1000.00", "75.00", dependents=10) >= Decimal("0")

    def test_result_quantized_to_cents(self):
        assert self._withhold("3500.00").as_tuple().exponent == -2

    def test_negative_dependents_rejected(self):
        with pytest.raises(ValidationError):
            self._withhold("3000.00", "360.00", dependents=-2)
