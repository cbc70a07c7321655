"""ORM models for campus payroll."""

from campus_payroll.models.base import Base, TimestampMixin
from campus_payroll.models.employee import Employee, EmployeePayProfile
from campus_payroll.models.institution import InstitutionSettings
from campus_payroll.models.payroll import (
    PayPeriod,
    PayrollRecord,
    PayrollRun,
    PayrollRunDetail,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "EmployeePayProfile",
    "InstitutionSettings",
    "PayPeriod",
    "PayrollRecord",
    "PayrollRun",
    "PayrollRunDetail",
]
