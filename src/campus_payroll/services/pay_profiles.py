"""Read-only access to employee pay profiles."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_payroll.calculators.types import Allowances, PayProfile
from campus_payroll.models import Employee, EmployeePayProfile

# Roles that never appear on the payroll configuration screen.
NON_STAFF_ROLES = ("Student",)


@dataclass(frozen=True)
class EmployeePayConfig:
    """One row of the payroll configuration overview."""

    employee_id: UUID
    full_name: str
    role: str
    department_name: str | None
    base_annual_salary: Decimal
    fixed_deductions: Decimal
    tax_rate: Decimal | None
    allowance_hra: Decimal
    allowance_da: Decimal
    allowance_other: Decimal
    bonus_target: Decimal


def to_pay_profile(row: EmployeePayProfile) -> PayProfile:
    """Copy a profile row into an immutable value.

    Generation works from this copy so later edits to the row never reach
    records that were already written.
    """
    return PayProfile(
        employee_id=row.employee_id,
        base_annual_salary=Decimal(row.base_annual_salary),
        fixed_deductions=Decimal(row.fixed_deductions or 0),
        tax_rate=None if row.tax_rate is None else Decimal(row.tax_rate),
        allowances=Allowances(
            hra=Decimal(row.allowance_hra or 0),
            da=Decimal(row.allowance_da or 0),
            other=Decimal(row.allowance_other or 0),
        ),
        bonus_target=Decimal(row.bonus_target or 0),
    )


class PayProfileStore:
    """Lookups over employee_pay_profile. This subsystem never writes profiles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_profile(self, employee_id: UUID) -> PayProfile | None:
        row = await self.session.get(EmployeePayProfile, employee_id)
        if row is None:
            return None
        return to_pay_profile(row)

    async def list_profiles(self) -> list[EmployeePayConfig]:
        """Payroll configuration for every staff member that has a profile."""
        result = await self.session.execute(
            select(Employee, EmployeePayProfile)
            .join(EmployeePayProfile, EmployeePayProfile.employee_id == Employee.employee_id)
            .where(Employee.role.not_in(NON_STAFF_ROLES))
            .order_by(Employee.full_name, Employee.employee_id)
        )

        return [
            EmployeePayConfig(
                employee_id=employee.employee_id,
                full_name=employee.full_name,
                role=employee.role,
                department_name=employee.department_name,
                base_annual_salary=profile.base_annual_salary,
                fixed_deductions=profile.fixed_deductions,
                tax_rate=profile.tax_rate,
                allowance_hra=profile.allowance_hra,
                allowance_da=profile.allowance_da,
                allowance_other=profile.allowance_other,
                bonus_target=profile.bonus_target,
            )
            for employee, profile in result.all()
        ]
