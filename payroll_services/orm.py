"""
ORM model for stored payslips.

Contract:
    ``PayslipModel`` persists one ``PayslipResult`` per (employee_id, month,
    year) and round-trips through ``to_dto()`` / ``from_dto()``.

Architecture: payroll_services.  Imports from payroll_kernel.db.base only
    (plus the service DTOs for conversion).

Invariants enforced:
    - UNIQUE (employee_id, month, year): one payslip per key.
    - Rows are never UPDATEd (see ``payroll_kernel.db.immutability``);
      a re-run deletes the old row and inserts a new one.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import JSON, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_engines.benefits import BenefitKind, BenefitLine
from payroll_kernel.db.base import TimestampedBase
from payroll_kernel.domain.money import round_money
from payroll_services.types import (
    ContractType,
    NegativeNetPayWarning,
    PayslipResult,
)


def _restore_hours(value: Decimal) -> Decimal:
    """Drop the Numeric(38, 9) padding from an hour count."""
    if value == value.to_integral_value():
        return value.quantize(Decimal(1))
    return value.normalize()


class PayslipModel(TimestampedBase):
    """Persistent payslip record (one per employee per period)."""

    __tablename__ = "payslips"

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payslips_employee_period"),
        Index("ix_payslips_period", "year", "month"),
    )

    employee_id: Mapped[str] = mapped_column(String(100), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(nullable=False)
    night_shift_hours: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    night_shift_pay: Mapped[Decimal] = mapped_column(nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(nullable=False)
    contribution_withheld: Mapped[Decimal] = mapped_column(nullable=False)
    income_tax_withheld: Mapped[Decimal] = mapped_column(nullable=False)
    benefit_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)
    employer_deposit: Mapped[Decimal] = mapped_column(nullable=False)
    generated_at: Mapped[datetime] = mapped_column(nullable=False)
    benefit_lines: Mapped[list | None] = mapped_column(JSON, nullable=True)
    warnings: Mapped[list | None] = mapped_column(JSON, nullable=True)

    def to_dto(self) -> PayslipResult:
        generated_at = self.generated_at
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=UTC)

        return PayslipResult(
            employee_id=self.employee_id,
            month=self.month,
            year=self.year,
            contract_type=ContractType(self.contract_type),
            base_salary=round_money(self.base_salary),
            overtime_pay=round_money(self.overtime_pay),
            night_shift_pay=round_money(self.night_shift_pay),
            gross_pay=round_money(self.gross_pay),
            contribution_withheld=round_money(self.contribution_withheld),
            income_tax_withheld=round_money(self.income_tax_withheld),
            benefit_deductions=round_money(self.benefit_deductions),
            total_deductions=round_money(self.total_deductions),
            net_pay=round_money(self.net_pay),
            generated_at=generated_at,
            employee_name=self.employee_name,
            overtime_hours=_restore_hours(self.overtime_hours),
            night_shift_hours=_restore_hours(self.night_shift_hours),
            benefit_lines=tuple(
                BenefitLine(
                    name=line["name"],
                    kind=BenefitKind(line["kind"]),
                    amount=Decimal(line["amount"]),
                    capped=line["capped"],
                )
                for line in self.benefit_lines or ()
            ),
            employer_deposit=round_money(self.employer_deposit),
            warnings=tuple(
                NegativeNetPayWarning(
                    employee_id=w["employee_id"],
                    unfloored_net_pay=Decimal(w["unfloored_net_pay"]),
                    code=w["code"],
                )
                for w in self.warnings or ()
            ),
        )

    @classmethod
    def from_dto(cls, dto: PayslipResult) -> PayslipModel:
        return cls(
            employee_id=dto.employee_id,
            employee_name=dto.employee_name,
            month=dto.month,
            year=dto.year,
            contract_type=dto.contract_type.value,
            base_salary=dto.base_salary,
            overtime_hours=dto.overtime_hours,
            night_shift_hours=dto.night_shift_hours,
            overtime_pay=dto.overtime_pay,
            night_shift_pay=dto.night_shift_pay,
            gross_pay=dto.gross_pay,
            contribution_withheld=dto.contribution_withheld,
            income_tax_withheld=dto.income_tax_withheld,
            benefit_deductions=dto.benefit_deductions,
            total_deductions=dto.total_deductions,
            net_pay=dto.net_pay,
            employer_deposit=dto.employer_deposit,
            generated_at=dto.generated_at,
            benefit_lines=[
                {
                    "name": line.name,
                    "kind": line.kind.value,
                    "amount": str(line.amount),
                    "capped": line.capped,
                }
                for line in dto.benefit_lines
            ]
            or None,
            warnings=[
                {
                    "employee_id": w.employee_id,
                    "unfloored_net_pay": str(w.unfloored_net_pay),
                    "code": w.code,
                }
                for w in dto.warnings
            ]
            or None,
        )
