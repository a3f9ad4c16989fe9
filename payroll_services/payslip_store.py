"""
SqlAlchemyPayslipStore -- SQL-backed payslip persistence.

Contract:
    Implements the ``PayslipStore`` protocol on top of ``PayslipModel``.
    Each call runs in its own ``session_scope`` transaction.

Invariants enforced:
    - Replace, never merge: ``upsert`` deletes the row for the key and
      inserts the new payslip in ONE transaction.  The row itself is never
      UPDATEd (the ORM immutability listener would reject it).
    - Single writer per key: upserts for the same key are serialized by a
      process-local per-key lock; the UNIQUE (employee_id, month, year)
      constraint rejects any duplicate that slips past it.
    - One transaction at a time on a shared connection: when every session
      runs on the same connection (in-memory SQLite), all sessions of the
      store are serialized by a store-wide lock.
"""

from __future__ import annotations

import threading
from contextlib import AbstractContextManager, nullcontext

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from payroll_kernel.db.engine import session_scope, shares_single_connection
from payroll_kernel.logging_config import get_logger
from payroll_services.orm import PayslipModel
from payroll_services.repositories import KeyedLocks, sort_for_listing
from payroll_services.types import PayslipResult, ProcessingState

logger = get_logger("services.payslip_store")


class SqlAlchemyPayslipStore:
    """Payslip store backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory
        self._locks = KeyedLocks()
        self._connection_lock = threading.Lock()

    def upsert(self, result: PayslipResult) -> ProcessingState:
        with self._locks.hold(result.key), self._serialized():
            with session_scope(self._session_factory) as session:
                existing = self._find(session, *result.key)
                if existing is not None:
                    session.delete(existing)
                    session.flush()
                session.add(PayslipModel.from_dto(result))

        state = (
            ProcessingState.SUPERSEDED if existing is not None else ProcessingState.PROCESSED
        )
        logger.info(
            "payslip_stored",
            extra={
                "employee_id": result.employee_id,
                "period": result.period,
                "state": state.value,
                "store": "sql",
            },
        )
        return state

    def get(self, employee_id: str, month: int, year: int) -> PayslipResult | None:
        with self._serialized(), session_scope(self._session_factory) as session:
            model = self._find(session, employee_id, month, year)
            return model.to_dto() if model is not None else None

    def list_for_period(self, month: int, year: int) -> list[PayslipResult]:
        with self._serialized(), session_scope(self._session_factory) as session:
            models = session.execute(
                select(PayslipModel).where(
                    PayslipModel.month == month,
                    PayslipModel.year == year,
                )
            ).scalars().all()
            return sort_for_listing(model.to_dto() for model in models)

    def count_for_key(self, employee_id: str, month: int, year: int) -> int:
        with self._serialized(), session_scope(self._session_factory) as session:
            return len(
                session.execute(
                    select(PayslipModel.id).where(
                        PayslipModel.employee_id == employee_id,
                        PayslipModel.month == month,
                        PayslipModel.year == year,
                    )
                ).all()
            )

    def _serialized(self) -> AbstractContextManager:
        if shares_single_connection(self._session_factory):
            return self._connection_lock
        return nullcontext()

    @staticmethod
    def _find(session: Session, employee_id: str, month: int, year: int) -> PayslipModel | None:
        return session.execute(
            select(PayslipModel).where(
                PayslipModel.employee_id == employee_id,
                PayslipModel.month == month,
                PayslipModel.year == year,
            )
        ).scalar_one_or_none()
