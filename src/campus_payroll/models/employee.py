"""Employee directory and pay profile models.

Both tables are owned by HR administration; payroll only reads them.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_payroll.models.base import Base, TimestampMixin, utcnow


class Employee(Base, TimestampMixin):
    """Employee record (directory data)."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)
    department_name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    pay_profile: Mapped[EmployeePayProfile | None] = relationship(
        back_populates="employee", uselist=False
    )


class EmployeePayProfile(Base):
    """Compensation configuration for one employee."""

    __tablename__ = "employee_pay_profile"

    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        primary_key=True,
    )
    base_annual_salary: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    fixed_deductions: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    # NULL means "use the configured default rate"
    tax_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 4), nullable=True)
    allowance_hra: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    allowance_da: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    allowance_other: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    bonus_target: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("base_annual_salary >= 0", name="pay_profile_salary_check"),
        CheckConstraint("fixed_deductions >= 0", name="pay_profile_deductions_check"),
        CheckConstraint(
            "tax_rate IS NULL OR (tax_rate >= 0 AND tax_rate <= 1)",
            name="pay_profile_tax_rate_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="pay_profile")
