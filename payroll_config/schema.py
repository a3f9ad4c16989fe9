"""
PayrollRules schema.

The complete set of tunables for one payroll run.  Rules are injected into
the orchestrator per run; the engine holds no process-wide mutable
configuration.  YAML fragments are parsed into this type by
``payroll_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_engines.brackets import BracketTable
from payroll_engines.premiums import DEFAULT_HOURS_PER_MONTH, NightShiftPolicy
from payroll_kernel.domain.money import HUNDRED, ZERO
from payroll_kernel.exceptions import ConfigurationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.schema")


class MissingTimesheetPolicy(str, Enum):
    """What to do when an employee has no timesheet summary for the period."""

    ZERO_HOURS = "zero_hours"  # Treat as no overtime and no night hours
    FAIL = "fail"  # Record a per-employee failure


@dataclass(frozen=True)
class PayrollRules:
    """
    Active payroll configuration.

    Percentages are expressed as percent values (``Decimal("50")`` = 50%).
    """

    contribution_table: BracketTable
    contribution_ceiling: Decimal
    withholding_table: BracketTable
    per_dependent_deduction: Decimal
    overtime_premium_percent: Decimal = Decimal("50")
    night_shift_premium_percent: Decimal = Decimal("20")
    hours_per_month: Decimal = DEFAULT_HOURS_PER_MONTH
    transport_allowance_cap_percent: Decimal = Decimal("6")
    employer_deposit_percent: Decimal = Decimal("8")
    night_shift_policy: NightShiftPolicy = NightShiftPolicy.PREMIUM_ONLY
    missing_timesheet_policy: MissingTimesheetPolicy = MissingTimesheetPolicy.ZERO_HOURS
    max_workers: int = 4
    name: str = "default"

    def __post_init__(self):
        if not isinstance(self.contribution_table, BracketTable):
            raise ConfigurationError("must be a BracketTable", field="contribution_table")
        if not isinstance(self.withholding_table, BracketTable):
            raise ConfigurationError("must be a BracketTable", field="withholding_table")

        for field_name in (
            "contribution_ceiling",
            "per_dependent_deduction",
            "overtime_premium_percent",
            "night_shift_premium_percent",
            "transport_allowance_cap_percent",
            "employer_deposit_percent",
        ):
            value = getattr(self, field_name)
            if not isinstance(value, Decimal):
                raise ConfigurationError(
                    f"must be Decimal, got {type(value).__name__}", field=field_name
                )
            if value < ZERO:
                raise ConfigurationError(f"cannot be negative: {value}", field=field_name)

        if self.hours_per_month <= ZERO:
            raise ConfigurationError("must be positive", field="hours_per_month")
        if self.transport_allowance_cap_percent > HUNDRED:
            raise ConfigurationError("cannot exceed 100", field="transport_allowance_cap_percent")
        if self.max_workers < 1:
            raise ConfigurationError("must be at least 1", field="max_workers")

        logger.debug(
            "payroll_rules_initialized",
            extra={
                "rules": self.name,
                "contribution_ceiling": str(self.contribution_ceiling),
                "contribution_ranges": len(self.contribution_table),
                "withholding_ranges": len(self.withholding_table),
                "hours_per_month": str(self.hours_per_month),
                "night_shift_policy": self.night_shift_policy.value,
                "missing_timesheet_policy": self.missing_timesheet_policy.value,
                "max_workers": self.max_workers,
            },
        )
