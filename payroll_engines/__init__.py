"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface for
    ``payroll_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ``payroll_kernel`` (domain helpers, exceptions, logging).
    MUST NOT import ``payroll_services`` or ``payroll_config``.

Invariants enforced:
    - Purity: engines never read the clock, a repository or configuration
      files; every tunable is a parameter.
    - Decimal-only arithmetic: floats are rejected at the boundary.
    - Every monetary output is rounded half-up to 2 places where computed.

Usage:
    from payroll_engines import (
        BracketTable,
        compute_contribution,
        compute_withholding,
        price_hours,
        aggregate_benefits,
    )
"""

from payroll_engines.benefits import (
    BenefitElection,
    BenefitKind,
    BenefitLine,
    aggregate_benefits,
    benefit_amount,
    itemize_benefits,
)
from payroll_engines.brackets import (
    BracketMatch,
    BracketPolicy,
    BracketRange,
    BracketTable,
    apply_bracket,
    bracket_tax,
)
from payroll_engines.contribution import compute_contribution, contribution_base
from payroll_engines.employer import compute_employer_deposit
from payroll_engines.premiums import (
    DEFAULT_HOURS_PER_MONTH,
    HoursPricing,
    NightShiftPolicy,
    hourly_rate,
    night_shift_pay,
    overtime_pay,
    price_hours,
)
from payroll_engines.withholding import compute_withholding, taxable_base

__all__ = [
    "BenefitElection",
    "BenefitKind",
    "BenefitLine",
    "aggregate_benefits",
    "benefit_amount",
    "itemize_benefits",
    "BracketMatch",
    "BracketPolicy",
    "BracketRange",
    "BracketTable",
    "apply_bracket",
    "bracket_tax",
    "compute_contribution",
    "contribution_base",
    "compute_employer_deposit",
    "DEFAULT_HOURS_PER_MONTH",
    "HoursPricing",
    "NightShiftPolicy",
    "hourly_rate",
    "night_shift_pay",
    "overtime_pay",
    "price_hours",
    "compute_withholding",
    "taxable_base",
]
