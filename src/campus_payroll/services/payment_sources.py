"""Formal records and ad-hoc run details as one tagged union of payments.

The generator and the snapshotter know nothing about each other's tables.
This module is the only place that lines the two up, and the history
resolver and payslip builder read exclusively through it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import Numeric, String, cast, literal_column, null, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Subquery

from campus_payroll.models import Employee, PayPeriod, PayrollRecord, PayrollRun, PayrollRunDetail


class PaymentSource(str, Enum):
    """Which pathway produced a payment."""

    FORMAL = "formal"
    MANUAL = "manual"


@dataclass(frozen=True)
class PaymentEntry:
    """One payment to one employee, from either pathway.

    ``id`` is the PayrollRecord id for formal payments and the PayrollRun id
    for manual ones; a manual id is shared by every employee in the run.
    """

    id: UUID
    source: PaymentSource
    employee_id: UUID
    employee_name: str
    department_name: str | None
    gross_pay: Decimal
    taxes: Decimal | None  # manual runs carry no separate tax figure
    deductions: Decimal
    net_pay: Decimal
    tax_rate: Decimal | None
    days_paid: Decimal | None
    status: str
    period_start: date
    period_end: date

    @classmethod
    def from_row(cls, row: Any) -> PaymentEntry:
        return cls(
            id=row.id,
            source=PaymentSource(row.source),
            employee_id=row.employee_id,
            employee_name=row.employee_name,
            department_name=row.department_name,
            gross_pay=row.gross_pay,
            taxes=row.taxes,
            deductions=row.deductions,
            net_pay=row.net_pay,
            tax_rate=row.tax_rate,
            days_paid=row.days_paid,
            status=row.status,
            period_start=row.period_start,
            period_end=row.period_end,
        )


def payment_union() -> Subquery:
    """UNION ALL of both pathways in one column layout."""
    formal = (
        select(
            PayrollRecord.record_id.label("id"),
            literal_column(f"'{PaymentSource.FORMAL.value}'", String).label("source"),
            PayrollRecord.employee_id.label("employee_id"),
            Employee.full_name.label("employee_name"),
            Employee.department_name.label("department_name"),
            PayrollRecord.gross_pay.label("gross_pay"),
            PayrollRecord.taxes.label("taxes"),
            PayrollRecord.deductions.label("deductions"),
            PayrollRecord.net_pay.label("net_pay"),
            PayrollRecord.tax_rate.label("tax_rate"),
            cast(null(), Numeric(5, 2)).label("days_paid"),
            PayrollRecord.status.label("status"),
            PayPeriod.start_date.label("period_start"),
            PayPeriod.end_date.label("period_end"),
        )
        .join(PayPeriod, PayrollRecord.period_id == PayPeriod.period_id)
        .join(Employee, PayrollRecord.employee_id == Employee.employee_id)
    )

    manual = select(
        PayrollRunDetail.run_id.label("id"),
        literal_column(f"'{PaymentSource.MANUAL.value}'", String).label("source"),
        PayrollRunDetail.employee_id.label("employee_id"),
        PayrollRunDetail.full_name.label("employee_name"),
        PayrollRunDetail.department_name.label("department_name"),
        PayrollRunDetail.gross_pay.label("gross_pay"),
        cast(null(), Numeric(12, 2)).label("taxes"),
        PayrollRunDetail.deductions.label("deductions"),
        PayrollRunDetail.net_pay.label("net_pay"),
        cast(null(), Numeric(5, 4)).label("tax_rate"),
        PayrollRunDetail.days_paid.label("days_paid"),
        PayrollRun.status.label("status"),
        PayrollRun.period_start.label("period_start"),
        PayrollRun.period_end.label("period_end"),
    ).join(PayrollRun, PayrollRunDetail.run_id == PayrollRun.run_id)

    return union_all(formal, manual).subquery("payments")


async def payments_for_employee(session: AsyncSession, employee_id: UUID) -> list[PaymentEntry]:
    """All payments to an employee, newest period first.

    Ties on period_end are broken by source, then id.
    """
    payments = payment_union()
    result = await session.execute(
        select(payments)
        .where(payments.c.employee_id == employee_id)
        .order_by(
            payments.c.period_end.desc(),
            payments.c.source,
            payments.c.id,
        )
    )
    return [PaymentEntry.from_row(row) for row in result.all()]


async def payments_by_id(session: AsyncSession, record_id: UUID) -> list[PaymentEntry]:
    """Every payment carrying this id: one for a formal record, one per employee for a run."""
    payments = payment_union()
    result = await session.execute(
        select(payments)
        .where(payments.c.id == record_id)
        .order_by(payments.c.source, payments.c.employee_name, payments.c.employee_id)
    )
    return [PaymentEntry.from_row(row) for row in result.all()]
