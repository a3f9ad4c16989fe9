"""
Tests for the Benefits engine.

Covers:
- Fixed-amount and percent-of-gross elections
- Percent caps (transport allowance)
- Per-line rounding before summing
- Itemized lines
"""

from decimal import Decimal

import pytest

from payroll_engines.benefits import (
    BenefitElection,
    BenefitKind,
    aggregate_benefits,
    benefit_amount,
    itemize_benefits,
)
from payroll_kernel.exceptions import ConfigurationError, ValidationError

GROSS = Decimal("3000.00")


class TestBenefitElection:
    """Tests for election construction."""

    def test_transport_allowance_factory(self):
        election = BenefitElection.transport_allowance(Decimal("6"), Decimal("6"))

        assert election.kind is BenefitKind.PERCENT_OF_GROSS
        assert election.value == Decimal("6")
        assert election.cap == Decimal("6")
        assert election.name == "transport_allowance"

    def test_kind_coerced_from_string(self):
        election = BenefitElection(kind="fixed_amount", value=Decimal("10"))
        assert election.kind is BenefitKind.FIXED_AMOUNT

    def test_string_values_coerced(self):
        election = BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value="2.5", cap="6")
        assert election.value == Decimal("2.5")
        assert election.cap == Decimal("6")

    def test_negative_value_rejected(self):
        with pytest.raises(ValidationError):
            BenefitElection(kind=BenefitKind.FIXED_AMOUNT, value=Decimal("-1"))

    def test_negative_cap_rejected(self):
        with pytest.raises(ValidationError):
            BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("1"), cap=Decimal("-1"))

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            BenefitElection(kind=BenefitKind.FIXED_AMOUNT, value=10.5)


class TestBenefitAmount:
    """Tests for a single election."""

    def test_fixed_amount(self):
        election = BenefitElection(kind=BenefitKind.FIXED_AMOUNT, value=Decimal("150.50"))
        line = benefit_amount(election, GROSS)

        assert line.amount == Decimal("150.50")
        assert line.capped is False

    def test_fixed_amount_independent_of_gross(self):
        election = BenefitElection(kind=BenefitKind.FIXED_AMOUNT, value=Decimal("99.90"))
        assert benefit_amount(election, Decimal("0")).amount == Decimal("99.90")

    def test_percent_without_cap(self):
        election = BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("2.5"))
        assert benefit_amount(election, GROSS).amount == Decimal("75.00")

    def test_transport_within_cap(self):
        election = BenefitElection.transport_allowance(Decimal("6"), Decimal("6"))
        line = benefit_amount(election, GROSS)

        assert line.amount == Decimal("180.00")
        assert line.capped is False
        assert line.name == "transport_allowance"

    def test_percent_above_cap_is_capped(self):
        election = BenefitElection(
            kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("8"), cap=Decimal("6")
        )
        line = benefit_amount(election, GROSS)

        assert line.amount == Decimal("180.00")
        assert line.capped is True

    def test_percent_rounded_half_up(self):
        """6% of 1234.57 = 74.0742 -> 74.07."""
        election = BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("6"))
        assert benefit_amount(election, Decimal("1234.57")).amount == Decimal("74.07")


class TestAggregateBenefits:
    """Tests for aggregate_benefits and itemize_benefits."""

    def test_empty_elections(self):
        assert aggregate_benefits([], GROSS) == Decimal("0")

    def test_sums_mixed_elections(self):
        elections = [
            BenefitElection.transport_allowance(Decimal("6"), Decimal("6")),
            BenefitElection(kind=BenefitKind.FIXED_AMOUNT, value=Decimal("120.00"), name="meal"),
            BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("1"), name="union"),
        ]
        assert aggregate_benefits(elections, GROSS) == Decimal("330.00")

    def test_each_line_rounded_before_summing(self):
        """0.5% of 1.01 = 0.00505 -> 0.01 per line, 0.02 total (not 0.01)."""
        election = BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("0.5"))
        assert aggregate_benefits([election, election], Decimal("1.01")) == Decimal("0.02")

    def test_does_not_filter_elections(self):
        """Every election passed in is counted; status filtering is the caller's job."""
        election = BenefitElection(kind=BenefitKind.FIXED_AMOUNT, value=Decimal("10"))
        assert aggregate_benefits([election] * 3, GROSS) == Decimal("30")

    def test_itemized_lines_add_up_to_aggregate(self):
        elections = [
            BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("3.33"), name="a"),
            BenefitElection(kind=BenefitKind.PERCENT_OF_GROSS, value=Decimal("1.17"), name="b"),
        ]
        gross = Decimal("2345.67")
        lines = itemize_benefits(elections, gross)

        assert [line.name for line in lines] == ["a", "b"]
        assert sum(line.amount for line in lines) == aggregate_benefits(elections, gross)

    def test_negative_gross_rejected(self):
        with pytest.raises(ConfigurationError):
            aggregate_benefits([], Decimal("-1"))
