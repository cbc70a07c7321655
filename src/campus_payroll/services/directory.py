"""Employee directory collaborator: who is eligible for formal payroll."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_payroll.calculators.types import PayProfile
from campus_payroll.models import Employee, EmployeePayProfile
from campus_payroll.services.pay_profiles import to_pay_profile

DEFAULT_ELIGIBLE_ROLES = ("Teacher", "Admin")


@dataclass(frozen=True)
class EligibleEmployee:
    """An employee with a pay profile and a payroll-eligible role."""

    employee_id: UUID
    full_name: str
    role: str
    department_name: str | None
    pay_profile: PayProfile


class EmployeeDirectory(Protocol):
    """Source of the employees formal generation pays."""

    async def list_eligible_employees(self, session: AsyncSession) -> list[EligibleEmployee]:
        ...


class SqlEmployeeDirectory:
    """Directory backed by the employee and employee_pay_profile tables."""

    def __init__(self, eligible_roles: Iterable[str] = DEFAULT_ELIGIBLE_ROLES):
        self.eligible_roles = tuple(eligible_roles)

    async def list_eligible_employees(self, session: AsyncSession) -> list[EligibleEmployee]:
        # Inner join: employees without a profile are never eligible
        result = await session.execute(
            select(Employee, EmployeePayProfile)
            .join(EmployeePayProfile, EmployeePayProfile.employee_id == Employee.employee_id)
            .where(Employee.role.in_(self.eligible_roles))
            .order_by(Employee.full_name, Employee.employee_id)
        )

        return [
            EligibleEmployee(
                employee_id=employee.employee_id,
                full_name=employee.full_name,
                role=employee.role,
                department_name=employee.department_name,
                pay_profile=to_pay_profile(profile),
            )
            for employee, profile in result.all()
        ]
