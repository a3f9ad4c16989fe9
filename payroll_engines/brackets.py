"""
Bracket Table Engine - Rate lookup over ordered numeric ranges.

Shared by the contribution calculator and the withholding calculator.
Pure functions with no I/O - tables provided as parameters.

A table is a validated value type.  ``BracketTable.from_ranges`` is the
single way to build one and rejects malformed tables at construction:

    * at least one range, first range starting at 0
    * sorted ascending by ``lower_bound``
    * cent-step contiguous: each ``lower_bound`` is the previous
      ``upper_bound + 0.01`` (no gaps, no overlaps)
    * exactly one unbounded range (``upper_bound=None``) and it is the last

Two application policies are supported:

    FLAT_RATE_AT_BRACKET      amount * rate          (whole amount, not marginal)
    MARGINAL_WITH_DEDUCTION   amount * rate - deduction, floored at 0

Usage:
    from decimal import Decimal
    from payroll_engines.brackets import BracketPolicy, BracketTable, bracket_tax

    table = BracketTable.from_ranges([
        {"lower_bound": "0", "upper_bound": "2259.20", "rate": "0"},
        {"lower_bound": "2259.21", "upper_bound": None, "rate": "7.5",
         "deduction": "169.44"},
    ])
    bracket_tax(table, Decimal("2640.00"), BracketPolicy.MARGINAL_WITH_DEDUCTION)
    # 28.56 (unrounded)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_kernel.domain.money import CENT, ZERO, percent_of, to_decimal
from payroll_kernel.exceptions import (
    ConfigurationError,
    InvalidBracketTableError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.brackets")


class BracketPolicy(str, Enum):
    """How the matched bracket is applied to an amount."""

    FLAT_RATE_AT_BRACKET = "flat_rate_at_bracket"  # Contribution tables
    MARGINAL_WITH_DEDUCTION = "marginal_with_deduction"  # Withholding tables


@dataclass(frozen=True)
class BracketRange:
    """
    One range of a bracket table.

    ``rate`` is a percentage (e.g. 7.5 for 7.5%).  ``upper_bound=None``
    means unbounded.
    """

    lower_bound: Decimal
    upper_bound: Decimal | None
    rate: Decimal
    deduction: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "lower_bound", to_decimal(self.lower_bound, "lower_bound"))
        if self.upper_bound is not None:
            object.__setattr__(
                self, "upper_bound", to_decimal(self.upper_bound, "upper_bound")
            )
        object.__setattr__(self, "rate", to_decimal(self.rate, "rate"))
        object.__setattr__(self, "deduction", to_decimal(self.deduction, "deduction"))

    @property
    def is_unbounded(self) -> bool:
        return self.upper_bound is None

    def contains(self, amount: Decimal) -> bool:
        """True when ``lower_bound <= amount <= upper_bound``."""
        if amount < self.lower_bound:
            return False
        return self.upper_bound is None or amount <= self.upper_bound


@dataclass(frozen=True)
class BracketMatch:
    """The range selected for an amount."""

    index: int
    rate: Decimal
    deduction: Decimal
    bracket: BracketRange


@dataclass(frozen=True)
class BracketTable:
    """
    Validated, immutable bracket table.

    Replaced as a whole; the engine never edits a table.
    """

    ranges: tuple[BracketRange, ...]
    name: str = ""

    def __post_init__(self) -> None:
        _validate_ranges(self.ranges)

    @classmethod
    def from_ranges(
        cls,
        ranges: Iterable[BracketRange | Mapping[str, Any]],
        name: str = "",
    ) -> BracketTable:
        """
        Build a table from ranges or plain mappings (e.g. parsed YAML).

        Mapping keys: ``lower_bound``, ``upper_bound`` (None/absent for the
        unbounded last range), ``rate``, optional ``deduction``.

        Raises:
            InvalidBracketTableError: If the ranges violate the table invariant.
            ConfigurationError: If a bound or rate is not a number.
        """
        built: list[BracketRange] = []
        for index, item in enumerate(ranges):
            if isinstance(item, BracketRange):
                built.append(item)
                continue
            try:
                built.append(
                    BracketRange(
                        lower_bound=item["lower_bound"],
                        upper_bound=item.get("upper_bound"),
                        rate=item["rate"],
                        deduction=item.get("deduction", ZERO),
                    )
                )
            except KeyError as e:
                raise InvalidBracketTableError(
                    f"missing key {e.args[0]!r}", range_index=index
                ) from e
            except (TypeError, ValueError) as e:
                raise InvalidBracketTableError(str(e), range_index=index) from e
        table = cls(ranges=tuple(built), name=name)
        logger.debug(
            "bracket_table_built",
            extra={"table": name, "range_count": len(built)},
        )
        return table

    def __len__(self) -> int:
        return len(self.ranges)


def _validate_ranges(ranges: tuple[BracketRange, ...]) -> None:
    if not ranges:
        raise InvalidBracketTableError("table has no ranges")

    if ranges[0].lower_bound != ZERO:
        raise InvalidBracketTableError("first range must start at 0", range_index=0)

    for index, bracket in enumerate(ranges):
        if bracket.rate < ZERO:
            raise InvalidBracketTableError("rate cannot be negative", range_index=index)
        if bracket.deduction < ZERO:
            raise InvalidBracketTableError(
                "deduction cannot be negative", range_index=index
            )
        is_last = index == len(ranges) - 1
        if bracket.is_unbounded and not is_last:
            raise InvalidBracketTableError(
                "only the last range may be unbounded", range_index=index
            )
        if is_last and not bracket.is_unbounded:
            raise InvalidBracketTableError(
                "last range must be unbounded", range_index=index
            )
        if not bracket.is_unbounded and bracket.upper_bound < bracket.lower_bound:
            raise InvalidBracketTableError(
                "upper_bound is below lower_bound", range_index=index
            )
        if index > 0:
            previous = ranges[index - 1]
            expected = previous.upper_bound + CENT
            if bracket.lower_bound < expected:
                raise InvalidBracketTableError(
                    "range overlaps or is out of order", range_index=index
                )
            if bracket.lower_bound > expected:
                raise InvalidBracketTableError(
                    f"gap between {previous.upper_bound} and {bracket.lower_bound}",
                    range_index=index,
                )


def apply_bracket(table: BracketTable, amount: Decimal) -> BracketMatch:
    """
    Find the unique range for ``amount``.

    A range covers ``lower_bound <= amount < next.lower_bound``, so an
    amount with fractions of a cent past ``upper_bound`` (e.g. 1412.005
    between 1412.00 and 1412.01) stays in the lower range.

    Raises:
        ConfigurationError: If ``amount`` is negative.
    """
    if amount < ZERO:
        raise ConfigurationError(f"amount cannot be negative: {amount}", field="amount")

    # ranges[0] starts at 0, so the scan stops at index 0 at the latest.
    index = len(table.ranges) - 1
    while table.ranges[index].lower_bound > amount:
        index -= 1
    bracket = table.ranges[index]
    return BracketMatch(
        index=index,
        rate=bracket.rate,
        deduction=bracket.deduction,
        bracket=bracket,
    )


def bracket_tax(
    table: BracketTable,
    amount: Decimal,
    policy: BracketPolicy,
) -> Decimal:
    """
    Apply ``table`` to ``amount`` under ``policy``.

    Returns the unrounded result; callers round where the amount becomes
    a payslip line.
    """
    match = apply_bracket(table, amount)
    if policy is BracketPolicy.FLAT_RATE_AT_BRACKET:
        return percent_of(amount, match.rate)
    tax = percent_of(amount, match.rate) - match.deduction
    return max(tax, ZERO)
