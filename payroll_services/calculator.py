"""
Payslip calculator -- composes the engines into one itemized payslip.

Pure: inputs are already loaded, the generation timestamp is passed in,
nothing is stored.  The orchestrator wraps this with repository access
and persistence.

    SALARIED
        gross  = base + overtime pay + night-shift pay
        deduct = contribution + withholding + benefits
    CONTRACTOR
        gross  = base
        deduct = benefits

    net = gross - deduct, floored at 0 with a NegativeNetPayWarning.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from payroll_config.schema import PayrollRules
from payroll_engines.benefits import BenefitElection, BenefitKind, itemize_benefits
from payroll_engines.contribution import compute_contribution
from payroll_engines.employer import compute_employer_deposit
from payroll_engines.premiums import price_hours
from payroll_engines.withholding import compute_withholding
from payroll_kernel.domain.money import ZERO, round_money, to_decimal
from payroll_kernel.exceptions import ValidationError
from payroll_kernel.logging_config import get_logger
from payroll_services.types import (
    ContractType,
    EmployeeContractInfo,
    NegativeNetPayWarning,
    PayslipResult,
    TimesheetSummary,
)

logger = get_logger("services.calculator")

TRANSPORT_ALLOWANCE = "transport_allowance"


def validate_contract(contract: EmployeeContractInfo) -> tuple[ContractType, Decimal, int]:
    """
    Check the contract fields needed for a payslip.

    Returns:
        The contract type, base salary and dependents, normalized.

    Raises:
        ValidationError: If a required field is missing or invalid.
    """
    try:
        contract_type = ContractType(contract.contract_type)
    except ValueError as e:
        raise ValidationError("contract_type", f"unknown value {contract.contract_type!r}") from e

    if contract.base_salary is None:
        raise ValidationError("base_salary", "is required")
    try:
        base_salary = to_decimal(contract.base_salary, "base_salary")
    except (TypeError, ValueError) as e:
        raise ValidationError("base_salary", str(e)) from e
    if base_salary < ZERO:
        raise ValidationError("base_salary", f"cannot be negative: {base_salary}")

    dependents = contract.dependents
    if not isinstance(dependents, int) or isinstance(dependents, bool):
        raise ValidationError("dependents", f"must be an integer, got {dependents!r}")
    if dependents < 0:
        raise ValidationError("dependents", f"cannot be negative: {dependents}")

    return contract_type, base_salary, dependents


def validate_timesheet(timesheet: TimesheetSummary) -> tuple[Decimal, Decimal]:
    hours = []
    for field in ("overtime_hours", "night_shift_hours"):
        try:
            value = to_decimal(getattr(timesheet, field), field)
        except (TypeError, ValueError) as e:
            raise ValidationError(field, str(e)) from e
        if value < ZERO:
            raise ValidationError(field, f"cannot be negative: {value}")
        hours.append(value)
    return hours[0], hours[1]


def apply_transport_cap(
    elections: Sequence[BenefitElection],
    cap_percent: Decimal,
) -> list[BenefitElection]:
    """Limit transport-allowance elections to the statutory cap percent."""
    capped = []
    for election in elections:
        if election.name == TRANSPORT_ALLOWANCE and election.kind is BenefitKind.PERCENT_OF_GROSS:
            cap = cap_percent if election.cap is None else min(election.cap, cap_percent)
            election = replace(election, cap=cap)
        capped.append(election)
    return capped


def calculate_payslip(
    contract: EmployeeContractInfo,
    timesheet: TimesheetSummary,
    elections: Sequence[BenefitElection],
    rules: PayrollRules,
    month: int,
    year: int,
    generated_at: datetime,
) -> PayslipResult:
    """
    Compute the itemized payslip of one employee for one period.

    Raises:
        ValidationError: Invalid contract fields or negative hours.
        ConfigurationError: Invalid rules or a bracket lookup failure.
    """
    contract_type, base_salary, dependents = validate_contract(contract)
    overtime_hours, night_shift_hours = validate_timesheet(timesheet)
    elections = apply_transport_cap(elections, rules.transport_allowance_cap_percent)

    if contract_type is ContractType.SALARIED:
        pricing = price_hours(
            base_salary=base_salary,
            overtime_hours=overtime_hours,
            night_shift_hours=night_shift_hours,
            hours_per_month=rules.hours_per_month,
            overtime_premium_percent=rules.overtime_premium_percent,
            night_shift_premium_percent=rules.night_shift_premium_percent,
            night_shift_policy=rules.night_shift_policy,
        )
        overtime = pricing.overtime_pay
        night_shift = pricing.night_shift_pay
        gross_pay = round_money(base_salary + overtime + night_shift)
        contribution = compute_contribution(
            gross_pay, rules.contribution_table, rules.contribution_ceiling
        )
        income_tax = compute_withholding(
            gross_pay,
            contribution,
            dependents,
            rules.per_dependent_deduction,
            rules.withholding_table,
        )
        employer_deposit = compute_employer_deposit(gross_pay, rules.employer_deposit_percent)
    else:
        overtime = night_shift = round_money(ZERO)
        gross_pay = round_money(base_salary)
        contribution = income_tax = employer_deposit = round_money(ZERO)

    benefit_lines = itemize_benefits(elections, gross_pay)
    benefits = round_money(sum((line.amount for line in benefit_lines), ZERO))
    total_deductions = contribution + income_tax + benefits
    net_pay = gross_pay - total_deductions

    warnings: tuple[NegativeNetPayWarning, ...] = ()
    if net_pay < ZERO:
        warnings = (
            NegativeNetPayWarning(employee_id=contract.employee_id, unfloored_net_pay=net_pay),
        )
        logger.warning(
            "negative_net_pay_floored",
            extra={
                "employee_id": contract.employee_id,
                "gross_pay": str(gross_pay),
                "total_deductions": str(total_deductions),
                "unfloored_net_pay": str(net_pay),
            },
        )
        net_pay = round_money(ZERO)

    return PayslipResult(
        employee_id=contract.employee_id,
        month=month,
        year=year,
        contract_type=contract_type,
        base_salary=round_money(base_salary),
        overtime_pay=overtime,
        night_shift_pay=night_shift,
        gross_pay=gross_pay,
        contribution_withheld=contribution,
        income_tax_withheld=income_tax,
        benefit_deductions=benefits,
        total_deductions=total_deductions,
        net_pay=net_pay,
        generated_at=generated_at,
        employee_name=contract.employee_name,
        overtime_hours=overtime_hours,
        night_shift_hours=night_shift_hours,
        benefit_lines=benefit_lines,
        employer_deposit=employer_deposit,
        warnings=warnings,
    )
