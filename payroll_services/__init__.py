"""
Payroll Services (``payroll_services``).

Orchestration layer: loads employee inputs through repository protocols,
computes payslips with ``payroll_engines`` and persists them through a
``PayslipStore``.

Usage:
    from payroll_config import load_payroll_rules
    from payroll_services import PayrollOrchestrator, InMemoryPayslipStore

    orchestrator = PayrollOrchestrator(
        worker_repository=workers,
        timesheet_repository=timesheets,
        benefits_repository=benefits,
        payslip_store=InMemoryPayslipStore(),
        rules=load_payroll_rules(),
    )
    run = orchestrator.process_payroll(month=1, year=2025)
"""

from payroll_services.calculator import calculate_payslip
from payroll_services.orchestrator import PayrollOrchestrator, validate_period
from payroll_services.repositories import (
    BenefitsRepository,
    InMemoryBenefitsRepository,
    InMemoryPayslipStore,
    InMemoryTimesheetRepository,
    InMemoryWorkerRepository,
    PayslipStore,
    TimesheetRepository,
    WorkerRepository,
)
from payroll_services.types import (
    ContractType,
    EmployeeContractInfo,
    EmployeeFailure,
    NegativeNetPayWarning,
    PayrollRunResult,
    PayslipResult,
    ProcessingState,
    TimesheetSummary,
)

__all__ = [
    "calculate_payslip",
    "PayrollOrchestrator",
    "validate_period",
    "BenefitsRepository",
    "InMemoryBenefitsRepository",
    "InMemoryPayslipStore",
    "InMemoryTimesheetRepository",
    "InMemoryWorkerRepository",
    "PayslipStore",
    "TimesheetRepository",
    "WorkerRepository",
    "ContractType",
    "EmployeeContractInfo",
    "EmployeeFailure",
    "NegativeNetPayWarning",
    "PayrollRunResult",
    "PayslipResult",
    "ProcessingState",
    "TimesheetSummary",
]
