"""
Concurrent writers for the same payslip key.

Many threads upsert payslips for one (employee, month, year).  The per-key
lock must leave exactly one stored payslip, equal to one of the writes,
with exactly one PROCESSED state reported.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from payroll_services import (
    ContractType,
    EmployeeContractInfo,
    InMemoryPayslipStore,
    ProcessingState,
    TimesheetSummary,
    calculate_payslip,
)
from payroll_services.payslip_store import SqlAlchemyPayslipStore

WRITERS = 16


def _variants(rules, count):
    base = calculate_payslip(
        contract=EmployeeContractInfo(
            employee_id="E-1",
            contract_type=ContractType.SALARIED,
            base_salary=Decimal("3000.00"),
        ),
        timesheet=TimesheetSummary.zero(),
        elections=(),
        rules=rules,
        month=1,
        year=2025,
        generated_at=datetime(2025, 1, 31, 12, 0, tzinfo=timezone.utc),
    )
    return [replace(base, employee_name=f"writer-{i}") for i in range(count)]


def _upsert_all(store, payslips):
    with ThreadPoolExecutor(max_workers=8) as pool:
        return list(pool.map(store.upsert, payslips))


class TestConcurrentUpsertMemory:
    def test_single_payslip_survives(self, default_rules):
        store = InMemoryPayslipStore()
        payslips = _variants(default_rules, WRITERS)

        states = _upsert_all(store, payslips)

        assert states.count(ProcessingState.PROCESSED) == 1
        assert states.count(ProcessingState.SUPERSEDED) == WRITERS - 1
        assert len(store) == 1
        assert store.get("E-1", 1, 2025) in payslips

    def test_distinct_keys_all_stored(self, default_rules):
        store = InMemoryPayslipStore()
        payslips = [
            replace(p, employee_id=f"E-{i}") for i, p in enumerate(_variants(default_rules, WRITERS))
        ]

        states = _upsert_all(store, payslips)

        assert set(states) == {ProcessingState.PROCESSED}
        assert len(store) == WRITERS


class TestConcurrentUpsertSql:
    @pytest.mark.slow
    def test_single_row_survives(self, sql_session_factory, default_rules):
        store = SqlAlchemyPayslipStore(sql_session_factory)
        payslips = _variants(default_rules, WRITERS)

        states = _upsert_all(store, payslips)

        assert states.count(ProcessingState.PROCESSED) == 1
        assert store.count_for_key("E-1", 1, 2025) == 1
        assert store.get("E-1", 1, 2025).employee_name in {p.employee_name for p in payslips}

    @pytest.mark.slow
    def test_distinct_keys_all_stored(self, sql_session_factory, default_rules):
        store = SqlAlchemyPayslipStore(sql_session_factory)
        payslips = [
            replace(p, employee_id=f"E-{i}") for i, p in enumerate(_variants(default_rules, WRITERS))
        ]

        states = _upsert_all(store, payslips)

        assert set(states) == {ProcessingState.PROCESSED}
        assert len(store.list_for_period(1, 2025)) == WRITERS
