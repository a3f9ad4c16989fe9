"""
Pytest fixtures for the payroll engine test suite.

Provides:
- Structured logging configuration and a ``captured_logs`` fixture
- Payroll rules (packaged defaults) and a deterministic clock
- In-memory repositories and an orchestrator factory
- SQLite in-memory SQLAlchemy session factory for the SQL payslip store
"""

import json
import logging
from collections.abc import Callable
from decimal import Decimal
from io import StringIO

import pytest

from payroll_config import PayrollRules, load_payroll_rules
from payroll_engines.benefits import BenefitElection
from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from payroll_kernel.db.immutability import unregister_immutability_listeners
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_services import (
    ContractType,
    EmployeeContractInfo,
    InMemoryBenefitsRepository,
    InMemoryPayslipStore,
    InMemoryTimesheetRepository,
    InMemoryWorkerRepository,
    PayrollOrchestrator,
    TimesheetSummary,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.compute_single("E-1", 1, 2025)
            logs = captured_logs()
            assert any(r["message"] == "payslip_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Rules and clock
# =============================================================================


@pytest.fixture(scope="session")
def default_rules() -> PayrollRules:
    """Packaged 2025 rules (7786.02 contribution ceiling)."""
    return load_payroll_rules()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


# =============================================================================
# Repositories and orchestrator
# =============================================================================


@pytest.fixture
def workers() -> InMemoryWorkerRepository:
    return InMemoryWorkerRepository()


@pytest.fixture
def timesheets() -> InMemoryTimesheetRepository:
    return InMemoryTimesheetRepository()


@pytest.fixture
def benefits() -> InMemoryBenefitsRepository:
    return InMemoryBenefitsRepository()


@pytest.fixture
def payslip_store() -> InMemoryPayslipStore:
    return InMemoryPayslipStore()


@pytest.fixture
def make_orchestrator(
    workers, timesheets, benefits, payslip_store, default_rules, deterministic_clock
) -> Callable[..., PayrollOrchestrator]:
    """Build an orchestrator over the shared in-memory repositories.

    Keyword overrides: ``rules``, ``store``, ``clock``.
    """

    def _make(rules=None, store=None, clock=None) -> PayrollOrchestrator:
        return PayrollOrchestrator(
            worker_repository=workers,
            timesheet_repository=timesheets,
            benefits_repository=benefits,
            payslip_store=store if store is not None else payslip_store,
            rules=rules if rules is not None else default_rules,
            clock=clock if clock is not None else deterministic_clock,
        )

    return _make


@pytest.fixture
def orchestrator(make_orchestrator) -> PayrollOrchestrator:
    return make_orchestrator()


@pytest.fixture
def add_employee(workers, timesheets, benefits):
    """Register an employee with optional hours and benefit elections."""

    def _add(
        employee_id: str,
        base_salary: str | Decimal | None = "3000.00",
        contract_type: ContractType = ContractType.SALARIED,
        dependents: int = 0,
        name: str = "",
        overtime_hours: str = "0",
        night_shift_hours: str = "0",
        elections: tuple[BenefitElection, ...] = (),
        month: int = 1,
        year: int = 2025,
        with_timesheet: bool = True,
    ) -> EmployeeContractInfo:
        contract = EmployeeContractInfo(
            employee_id=employee_id,
            contract_type=contract_type,
            base_salary=Decimal(base_salary) if isinstance(base_salary, str) else base_salary,
            dependents=dependents,
            employee_name=name,
        )
        workers.add(contract)
        if with_timesheet:
            timesheets.add(
                employee_id,
                month,
                year,
                TimesheetSummary(
                    overtime_hours=Decimal(overtime_hours),
                    night_shift_hours=Decimal(night_shift_hours),
                ),
            )
        for election in elections:
            benefits.add(employee_id, election)
        return contract

    return _add


@pytest.fixture
def transport_6_percent() -> BenefitElection:
    return BenefitElection.transport_allowance(Decimal("6"), Decimal("6"))


# =============================================================================
# SQLAlchemy fixtures
# =============================================================================


@pytest.fixture
def sql_session_factory():
    """Fresh in-memory SQLite database with the payslip table created."""
    init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield get_session_factory()
    unregister_immutability_listeners()
    drop_tables()
    reset_engine()
