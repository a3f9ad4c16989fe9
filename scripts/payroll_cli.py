#!/usr/bin/env python3
"""
Run a payroll batch for a YAML roster and print the payslips as JSON.

The roster file lists the employees with their contract data, the
period's hours and their active benefit elections:

    month: 1
    year: 2025
    employees:
      - employee_id: E-001
        name: Ana Souza
        contract_type: salaried
        base_salary: 3000.00
        dependents: 0
        overtime_hours: 0
        night_shift_hours: 0
        benefits:
          - {name: transport_allowance, kind: percent_of_gross, value: 6, cap: 6}

Usage:
    python3 scripts/payroll_cli.py roster.yaml
    python3 scripts/payroll_cli.py roster.yaml --rules rules.yaml --month 2
    python3 scripts/payroll_cli.py roster.yaml --database-url sqlite:///payroll.db
    python3 scripts/payroll_cli.py roster.yaml --preview E-001
"""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from decimal import Decimal
from pathlib import Path
from typing import Any

from payroll_config import load_payroll_rules
from payroll_config.loader import load_yaml_file, parse_decimal
from payroll_engines.benefits import BenefitElection, BenefitKind
from payroll_kernel.exceptions import PayrollEngineError, ValidationError
from payroll_kernel.logging_config import LogContext, configure_logging, get_logger
from payroll_services import (
    EmployeeContractInfo,
    EmployeeFailure,
    InMemoryBenefitsRepository,
    InMemoryPayslipStore,
    InMemoryTimesheetRepository,
    InMemoryWorkerRepository,
    PayrollOrchestrator,
    PayrollRunResult,
    PayslipResult,
    TimesheetSummary,
)

logger = get_logger("cli.payroll")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run payroll for a YAML roster and print payslips as JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("roster", type=Path, help="Path to the roster YAML file.")
    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Payroll rules YAML (default: packaged rules).",
    )
    parser.add_argument("--month", type=int, default=None, help="Override roster month.")
    parser.add_argument("--year", type=int, default=None, help="Override roster year.")
    parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Batch deadline in seconds; unstarted employees are not processed.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Store payslips in this database instead of memory.",
    )
    parser.add_argument(
        "--preview",
        metavar="EMPLOYEE_ID",
        default=None,
        help="Compute one employee's payslip without storing it.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING).")
    return parser.parse_args(argv)


def _optional_decimal(value: Any, field: str) -> Decimal | None:
    return None if value is None else parse_decimal(value, field)


def _parse_entry(
    employee_id: str,
    entry: dict[str, Any],
) -> tuple[EmployeeContractInfo, TimesheetSummary | None, list[BenefitElection]]:
    # contract_type and dependents pass through raw; the calculator validates them.
    contract = EmployeeContractInfo(
        employee_id=employee_id,
        contract_type=entry.get("contract_type", "salaried"),
        base_salary=_optional_decimal(entry.get("base_salary"), "base_salary"),
        dependents=entry.get("dependents", 0),
        employee_name=str(entry.get("name", "")),
    )

    timesheet = None
    if "overtime_hours" in entry or "night_shift_hours" in entry:
        timesheet = TimesheetSummary(
            overtime_hours=parse_decimal(entry.get("overtime_hours", 0), "overtime_hours"),
            night_shift_hours=parse_decimal(entry.get("night_shift_hours", 0), "night_shift_hours"),
        )

    elections = []
    for item in entry.get("benefits", []):
        if "kind" not in item or "value" not in item:
            raise ValidationError("benefit", "kind and value are required")
        cap = item.get("cap")
        try:
            kind = BenefitKind(item["kind"])
        except ValueError as e:
            raise ValidationError("benefit kind", f"unknown value {item['kind']!r}") from e
        elections.append(
            BenefitElection(
                kind=kind,
                value=parse_decimal(item["value"], "value"),
                cap=None if cap is None else parse_decimal(cap, "cap"),
                name=str(item.get("name", "")),
            )
        )
    return contract, timesheet, elections


def build_repositories(
    roster: dict[str, Any],
    month: int,
    year: int,
) -> tuple[
    InMemoryWorkerRepository,
    InMemoryTimesheetRepository,
    InMemoryBenefitsRepository,
    list[EmployeeFailure],
]:
    """
    Load roster entries into in-memory repositories.

    An entry whose hours or benefits cannot be read is left out of the
    repositories and returned as a failure (active entries only); the other
    entries still load.
    """
    workers = InMemoryWorkerRepository()
    timesheets = InMemoryTimesheetRepository()
    benefits = InMemoryBenefitsRepository()
    rejected: list[EmployeeFailure] = []

    for index, entry in enumerate(roster.get("employees", [])):
        employee_id = str(entry.get("employee_id", f"entry-{index}"))
        active = bool(entry.get("active", True))
        try:
            if "employee_id" not in entry:
                raise ValidationError("employee_id", "is required")
            contract, timesheet, elections = _parse_entry(employee_id, entry)
        except PayrollEngineError as e:
            logger.warning(
                "roster_entry_rejected",
                extra={"employee_id": employee_id, "error_code": e.code, "error": str(e)},
            )
            if active:
                rejected.append(
                    EmployeeFailure(employee_id=employee_id, reason=str(e), code=e.code)
                )
            continue

        workers.add(contract, active=active)
        if timesheet is not None:
            timesheets.add(employee_id, month, year, timesheet)
        for election in elections:
            benefits.add(employee_id, election)
    return workers, timesheets, benefits, rejected


def payslip_to_dict(payslip: PayslipResult) -> dict[str, Any]:
    return {
        "employee_id": payslip.employee_id,
        "employee_name": payslip.employee_name,
        "period": payslip.period,
        "contract_type": payslip.contract_type.value,
        "base_salary": str(payslip.base_salary),
        "overtime_hours": str(payslip.overtime_hours),
        "overtime_pay": str(payslip.overtime_pay),
        "night_shift_hours": str(payslip.night_shift_hours),
        "night_shift_pay": str(payslip.night_shift_pay),
        "gross_pay": str(payslip.gross_pay),
        "contribution_withheld": str(payslip.contribution_withheld),
        "income_tax_withheld": str(payslip.income_tax_withheld),
        "benefits": [
            {"name": line.name, "amount": str(line.amount), "capped": line.capped}
            for line in payslip.benefit_lines
        ],
        "benefit_deductions": str(payslip.benefit_deductions),
        "total_deductions": str(payslip.total_deductions),
        "net_pay": str(payslip.net_pay),
        "employer_deposit": str(payslip.employer_deposit),
        "generated_at": payslip.generated_at.isoformat(),
        "warnings": [w.message for w in payslip.warnings],
    }


def run_result_to_dict(
    result: PayrollRunResult,
    rejected: list[EmployeeFailure] | tuple[EmployeeFailure, ...] = (),
) -> dict[str, Any]:
    return {
        "run_id": result.run_id,
        "period": f"{result.year:04d}-{result.month:02d}",
        "succeeded": [payslip_to_dict(p) for p in result.succeeded],
        "failed": [
            {"employee_id": f.employee_id, "code": f.code, "reason": f.reason}
            for f in (*rejected, *result.failed)
        ],
        "not_processed": list(result.not_processed),
    }


def _payslip_store(database_url: str | None):
    if database_url is None:
        return InMemoryPayslipStore()

    from payroll_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
    from payroll_services.payslip_store import SqlAlchemyPayslipStore

    init_engine_from_url(database_url)
    create_tables()
    return SqlAlchemyPayslipStore(get_session_factory())


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(level=args.log_level.upper(), stream=sys.stderr)

    with LogContext.bind(correlation_id=str(uuid.uuid4())):
        return _run(args)


def _run(args: argparse.Namespace) -> int:
    roster = load_yaml_file(args.roster)
    month = args.month if args.month is not None else int(roster.get("month", 0))
    year = args.year if args.year is not None else int(roster.get("year", 0))

    try:
        rules = load_payroll_rules(args.rules)
        workers, timesheets, benefits, rejected = build_repositories(roster, month, year)
        orchestrator = PayrollOrchestrator(
            worker_repository=workers,
            timesheet_repository=timesheets,
            benefits_repository=benefits,
            payslip_store=_payslip_store(args.database_url),
            rules=rules,
        )
        if args.preview is not None:
            output: dict[str, Any] = payslip_to_dict(
                orchestrator.preview_single(args.preview, month, year)
            )
            exit_code = 0
        else:
            result = orchestrator.process_payroll(month, year, deadline_seconds=args.deadline)
            output = run_result_to_dict(result, rejected)
            exit_code = 0 if result.is_complete and not rejected else 2
    except PayrollEngineError as e:
        logger.error("payroll_cli_failed", extra={"error_code": e.code, "error": str(e)})
        print(f"ERROR [{e.code}]: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
