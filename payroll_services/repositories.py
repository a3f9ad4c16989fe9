"""
Repository and store interfaces consumed by the payroll orchestrator.

Contract:
    ``WorkerRepository``, ``TimesheetRepository``, ``BenefitsRepository``
    and ``PayslipStore`` are structural protocols implemented by the
    external collaborators (HTTP layer, document database, SQL store).
    In-memory implementations are provided for tests and the CLI.

Invariants enforced:
    - ``PayslipStore.upsert`` is idempotent per (employee_id, month, year):
      exactly one payslip per key after any number of upserts.
    - Writes for the same key are serialized by a per-key lock
      (``KeyedLocks``); writes for different keys proceed in parallel.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

from payroll_engines.benefits import BenefitElection
from payroll_kernel.exceptions import EmployeeNotFoundError, TimesheetNotFoundError
from payroll_kernel.logging_config import get_logger
from payroll_services.types import (
    EmployeeContractInfo,
    PayslipResult,
    ProcessingState,
    TimesheetSummary,
)

logger = get_logger("services.repositories")

PayslipKey = tuple[str, int, int]


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class WorkerRepository(Protocol):
    """Source of employee contract data."""

    def get_contract_info(self, employee_id: str) -> EmployeeContractInfo:
        """Raises ``NotFoundError`` for an unknown employee."""
        ...

    def list_active_employee_ids(self) -> Sequence[str]:
        """Employees included in a payroll batch, in processing order."""
        ...


@runtime_checkable
class TimesheetRepository(Protocol):
    """Source of monthly overtime / night-shift totals."""

    def get_summary(self, employee_id: str, month: int, year: int) -> TimesheetSummary:
        """Raises ``NotFoundError`` when no timesheet exists for the period."""
        ...


@runtime_checkable
class BenefitsRepository(Protocol):
    """Source of benefit elections.  Returns ACTIVE elections only."""

    def get_active_elections(self, employee_id: str) -> Sequence[BenefitElection]:
        ...


@runtime_checkable
class PayslipStore(Protocol):
    """Persistent payslip storage keyed by (employee_id, month, year)."""

    def upsert(self, result: PayslipResult) -> ProcessingState:
        """Store ``result``, replacing any payslip with the same key.

        Returns PROCESSED for a new key and SUPERSEDED for a replacement.
        """
        ...

    def get(self, employee_id: str, month: int, year: int) -> PayslipResult | None:
        ...

    def list_for_period(self, month: int, year: int) -> list[PayslipResult]:
        """Payslips of a period ordered by employee name, then id."""
        ...


# =============================================================================
# Per-key locking
# =============================================================================


class KeyedLocks:
    """Lazily created lock per payslip key (single writer per key)."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[PayslipKey, threading.Lock] = {}

    def lock_for(self, key: PayslipKey) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: PayslipKey) -> Iterator[None]:
        with self.lock_for(key):
            yield


def sort_for_listing(payslips: Iterable[PayslipResult]) -> list[PayslipResult]:
    return sorted(payslips, key=lambda p: (p.employee_name, p.employee_id))


# =============================================================================
# In-memory implementations
# =============================================================================


class InMemoryWorkerRepository:
    """Worker records held in a dict; insertion order is batch order."""

    def __init__(self, contracts: Iterable[EmployeeContractInfo] = ()):
        self._contracts: dict[str, EmployeeContractInfo] = {}
        self._active: dict[str, bool] = {}
        for contract in contracts:
            self.add(contract)

    def add(self, contract: EmployeeContractInfo, active: bool = True) -> None:
        self._contracts[contract.employee_id] = contract
        self._active[contract.employee_id] = active

    def deactivate(self, employee_id: str) -> None:
        if employee_id not in self._contracts:
            raise EmployeeNotFoundError(employee_id)
        self._active[employee_id] = False

    def get_contract_info(self, employee_id: str) -> EmployeeContractInfo:
        contract = self._contracts.get(employee_id)
        if contract is None:
            raise EmployeeNotFoundError(employee_id)
        return contract

    def list_active_employee_ids(self) -> list[str]:
        return [eid for eid, active in self._active.items() if active]


class InMemoryTimesheetRepository:
    def __init__(self) -> None:
        self._summaries: dict[PayslipKey, TimesheetSummary] = {}

    def add(
        self, employee_id: str, month: int, year: int, summary: TimesheetSummary
    ) -> None:
        self._summaries[(employee_id, month, year)] = summary

    def get_summary(self, employee_id: str, month: int, year: int) -> TimesheetSummary:
        summary = self._summaries.get((employee_id, month, year))
        if summary is None:
            raise TimesheetNotFoundError(employee_id, month, year)
        return summary


class InMemoryBenefitsRepository:
    def __init__(self) -> None:
        self._elections: dict[str, list[BenefitElection]] = {}

    def add(self, employee_id: str, election: BenefitElection) -> None:
        self._elections.setdefault(employee_id, []).append(election)

    def get_active_elections(self, employee_id: str) -> list[BenefitElection]:
        return list(self._elections.get(employee_id, ()))


class InMemoryPayslipStore:
    """Dict-backed payslip store with a per-key write lock."""

    def __init__(self) -> None:
        self._payslips: dict[PayslipKey, PayslipResult] = {}
        self._locks = KeyedLocks()

    def upsert(self, result: PayslipResult) -> ProcessingState:
        with self._locks.hold(result.key):
            replaced = result.key in self._payslips
            self._payslips[result.key] = result
        state = ProcessingState.SUPERSEDED if replaced else ProcessingState.PROCESSED
        logger.debug(
            "payslip_stored",
            extra={
                "employee_id": result.employee_id,
                "period": result.period,
                "state": state.value,
                "store": "memory",
            },
        )
        return state

    def get(self, employee_id: str, month: int, year: int) -> PayslipResult | None:
        return self._payslips.get((employee_id, month, year))

    def list_for_period(self, month: int, year: int) -> list[PayslipResult]:
        return sort_for_listing(
            p for p in list(self._payslips.values()) if (p.month, p.year) == (month, year)
        )

    def __len__(self) -> int:
        return len(self._payslips)
