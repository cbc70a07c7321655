"""Pay period, formal payroll record, and ad-hoc run models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_payroll.models.base import Base, JSONType, TimestampMixin, utcnow

if TYPE_CHECKING:
    from campus_payroll.models.employee import Employee


# ===== Pay Periods =====


class PayPeriod(Base, TimestampMixin):
    """Administrative window for which payroll is generated once."""

    __tablename__ = "pay_period"

    period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Open")
    generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    generated_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Open', 'Generated')",
            name="pay_period_status_check",
        ),
        CheckConstraint("end_date >= start_date", name="pay_period_dates_check"),
    )

    # Relationships
    records: Mapped[list[PayrollRecord]] = relationship(back_populates="period")


# ===== Formal pathway =====


class PayrollRecord(Base, TimestampMixin):
    """One generated payroll line for an employee in a pay period. Immutable."""

    __tablename__ = "payroll_record"

    record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id"),
        nullable=False,
    )
    period_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_period.period_id"),
        nullable=False,
    )
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    taxes: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 4), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Generated")
    generated_by: Mapped[UUID] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "period_id", name="payroll_record_employee_period_unique"),
    )

    # Relationships
    period: Mapped[PayPeriod] = relationship(back_populates="records")
    employee: Mapped[Employee] = relationship()


# ===== Ad-hoc pathway =====


class PayrollRun(Base):
    """Header of a manually compiled, frozen payroll run."""

    __tablename__ = "payroll_run"

    run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    total_gross: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_net: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    run_by: Mapped[UUID] = mapped_column(nullable=False)
    run_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("period_end >= period_start", name="payroll_run_dates_check"),
    )

    # Relationships
    details: Mapped[list[PayrollRunDetail]] = relationship(
        back_populates="run",
        order_by="PayrollRunDetail.full_name",
    )


class PayrollRunDetail(Base):
    """Per-employee snapshot inside a payroll run."""

    __tablename__ = "payroll_run_detail"

    detail_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    run_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_run.run_id"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id"),
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    department_name: Mapped[str | None] = mapped_column(String, nullable=True)
    days_paid: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payslip_snapshot: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    __table_args__ = (
        UniqueConstraint("run_id", "employee_id", name="payroll_run_detail_employee_unique"),
    )

    # Relationships
    run: Mapped[PayrollRun] = relationship(back_populates="details")
