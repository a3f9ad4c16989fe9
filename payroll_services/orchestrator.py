"""
PayrollOrchestrator -- per-employee and batch payroll processing.

Contract:
    ``compute_single()`` loads one employee's inputs, calculates the
    payslip and stores it (replacing any prior payslip for the period).
    ``preview_single()`` does the same calculation without storing.
    ``process_payroll()`` runs every active employee of the roster on a
    bounded thread pool and reports succeeded / failed / not_processed.
    ``list_payslips()`` returns the stored payslips of a period.

Architecture: payroll_services.  Imports from payroll_engines (via the
    calculator), payroll_config, payroll_kernel and the repository
    protocols.

Invariants enforced:
    - Atomic per employee: a complete payslip is stored or an error is
      raised and nothing is stored.
    - Failure isolation: a ``PayrollEngineError`` (or any unexpected
      exception) for one employee becomes one ``EmployeeFailure`` and
      never aborts sibling computations.
    - Deadline: employees not started when the deadline elapses are
      reported as not_processed, never as failed.  Employees already
      running are allowed to finish.
    - All timestamps from the injected Clock.
    - Batch workers run in a copy of the caller's LogContext, so fields
      bound around ``process_payroll`` (e.g. correlation_id) reach every
      per-employee log line.

Non-goals:
    - Does NOT filter benefit elections by status (the repository returns
      active elections only).
"""

from __future__ import annotations

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor, wait
from uuid import uuid4

from payroll_config.schema import MissingTimesheetPolicy, PayrollRules
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.exceptions import (
    InvalidPeriodError,
    NotFoundError,
    PayrollEngineError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.calculator import calculate_payslip
from payroll_services.repositories import (
    BenefitsRepository,
    PayslipStore,
    TimesheetRepository,
    WorkerRepository,
)
from payroll_services.types import (
    EmployeeFailure,
    PayrollRunResult,
    PayslipResult,
    TimesheetSummary,
)

logger = get_logger("services.orchestrator")

UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


def validate_period(month: int, year: int) -> None:
    """Raises ``InvalidPeriodError`` unless month is 1-12 and year positive."""
    if (
        not isinstance(month, int)
        or not isinstance(year, int)
        or isinstance(month, bool)
        or isinstance(year, bool)
        or not 1 <= month <= 12
        or year < 1
    ):
        raise InvalidPeriodError(month, year)


class PayrollOrchestrator:
    """Composes repositories, rules and the payslip calculator.

    Rules are injected per instance; build a new orchestrator to run with
    different rules.
    """

    def __init__(
        self,
        worker_repository: WorkerRepository,
        timesheet_repository: TimesheetRepository,
        benefits_repository: BenefitsRepository,
        payslip_store: PayslipStore,
        rules: PayrollRules,
        clock: Clock | None = None,
    ):
        self._workers = worker_repository
        self._timesheets = timesheet_repository
        self._benefits = benefits_repository
        self._store = payslip_store
        self._rules = rules
        self._clock = clock or SystemClock()

    @property
    def rules(self) -> PayrollRules:
        return self._rules

    # -------------------------------------------------------------------------
    # Single employee
    # -------------------------------------------------------------------------

    def compute_single(self, employee_id: str, month: int, year: int) -> PayslipResult:
        """Calculate and store the payslip of one employee.

        Raises:
            InvalidPeriodError: If month/year is invalid.
            NotFoundError: Unknown employee, or missing timesheet under
                the FAIL policy.
            ValidationError / ConfigurationError: From the calculation.
        """
        validate_period(month, year)
        with LogContext.bind(employee_id=employee_id, period=_period(month, year)):
            result = self._calculate(employee_id, month, year)
            state = self._store.upsert(result)
            logger.info(
                "payslip_computed",
                extra={
                    "employee_id": employee_id,
                    "period": result.period,
                    "state": state.value,
                    "gross_pay": str(result.gross_pay),
                    "net_pay": str(result.net_pay),
                    "warning_count": len(result.warnings),
                },
            )
        return result

    def preview_single(self, employee_id: str, month: int, year: int) -> PayslipResult:
        """Calculate one employee's payslip without storing it."""
        validate_period(month, year)
        with LogContext.bind(employee_id=employee_id, period=_period(month, year)):
            result = self._calculate(employee_id, month, year)
            logger.info(
                "payslip_previewed",
                extra={"employee_id": employee_id, "net_pay": str(result.net_pay)},
            )
        return result

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    def process_payroll(
        self,
        month: int,
        year: int,
        deadline_seconds: float | None = None,
    ) -> PayrollRunResult:
        """Process every active employee for the period.

        Results are reported in roster order.
        """
        validate_period(month, year)
        run_id = str(uuid4())
        started_at = self._clock.now()
        employee_ids = list(self._workers.list_active_employee_ids())
        deadline_at = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

        with LogContext.bind(run_id=run_id, period=_period(month, year)):
            logger.info(
                "payroll_batch_started",
                extra={
                    "run_id": run_id,
                    "employee_count": len(employee_ids),
                    "max_workers": self._rules.max_workers,
                    "deadline_seconds": deadline_seconds,
                },
            )

            with ThreadPoolExecutor(
                max_workers=self._rules.max_workers,
                thread_name_prefix="payroll",
            ) as pool:
                futures = [
                    pool.submit(
                        contextvars.copy_context().run,
                        self._process_one,
                        run_id,
                        eid,
                        month,
                        year,
                        deadline_at,
                    )
                    for eid in employee_ids
                ]
                timeout = None
                if deadline_at is not None:
                    timeout = max(deadline_at - time.monotonic(), 0)
                _, pending = wait(futures, timeout=timeout)
                for future in pending:
                    future.cancel()

            succeeded: list[PayslipResult] = []
            failed: list[EmployeeFailure] = []
            not_processed: list[str] = []
            for employee_id, future in zip(employee_ids, futures):
                outcome = None if future.cancelled() else future.result()
                if outcome is None:
                    not_processed.append(employee_id)
                elif isinstance(outcome, EmployeeFailure):
                    failed.append(outcome)
                else:
                    succeeded.append(outcome)

            result = PayrollRunResult(
                run_id=run_id,
                month=month,
                year=year,
                succeeded=tuple(succeeded),
                failed=tuple(failed),
                not_processed=tuple(not_processed),
                started_at=started_at,
                completed_at=self._clock.now(),
            )

            logger.info(
                "payroll_batch_completed",
                extra={
                    "run_id": run_id,
                    "succeeded": len(result.succeeded),
                    "failed": len(result.failed),
                    "not_processed": len(result.not_processed),
                    "warnings": len(result.warnings),
                },
            )
        return result

    def list_payslips(self, month: int, year: int) -> list[PayslipResult]:
        """Stored payslips of a period, ordered by employee name then id."""
        validate_period(month, year)
        return self._store.list_for_period(month, year)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _process_one(
        self,
        run_id: str,
        employee_id: str,
        month: int,
        year: int,
        deadline_at: float | None,
    ) -> PayslipResult | EmployeeFailure | None:
        """Batch worker.  Returns None when the deadline elapsed before start."""
        if deadline_at is not None and time.monotonic() >= deadline_at:
            logger.warning(
                "employee_not_processed_deadline",
                extra={"run_id": run_id, "employee_id": employee_id},
            )
            return None

        with LogContext.bind(run_id=run_id):
            try:
                return self.compute_single(employee_id, month, year)
            except PayrollEngineError as e:
                logger.warning(
                    "employee_payroll_failed",
                    extra={
                        "run_id": run_id,
                        "employee_id": employee_id,
                        "error_code": e.code,
                        "error": str(e),
                    },
                )
                return EmployeeFailure(employee_id=employee_id, reason=str(e), code=e.code)
            except Exception as e:
                logger.exception(
                    "employee_payroll_unexpected_error",
                    extra={"run_id": run_id, "employee_id": employee_id},
                )
                return EmployeeFailure(
                    employee_id=employee_id,
                    reason=f"{type(e).__name__}: {e}",
                    code=UNEXPECTED_ERROR,
                )

    def _calculate(self, employee_id: str, month: int, year: int) -> PayslipResult:
        contract = self._workers.get_contract_info(employee_id)
        timesheet = self._load_timesheet(employee_id, month, year)
        elections = self._benefits.get_active_elections(employee_id)
        return calculate_payslip(
            contract=contract,
            timesheet=timesheet,
            elections=elections,
            rules=self._rules,
            month=month,
            year=year,
            generated_at=self._clock.now(),
        )

    def _load_timesheet(self, employee_id: str, month: int, year: int) -> TimesheetSummary:
        try:
            return self._timesheets.get_summary(employee_id, month, year)
        except NotFoundError:
            if self._rules.missing_timesheet_policy is MissingTimesheetPolicy.FAIL:
                raise
            logger.info(
                "timesheet_missing_zero_hours",
                extra={"employee_id": employee_id, "period": _period(month, year)},
            )
            return TimesheetSummary.zero()


def _period(month: int, year: int) -> str:
    return f"{year:04d}-{month:02d}"
