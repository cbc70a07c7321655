"""API routes."""

from campus_payroll.api.routes.employees import router as employees_router
from campus_payroll.api.routes.health import router as health_router
from campus_payroll.api.routes.payslips import router as payslips_router
from campus_payroll.api.routes.periods import router as periods_router
from campus_payroll.api.routes.runs import router as runs_router

__all__ = [
    "employees_router",
    "health_router",
    "payslips_router",
    "periods_router",
    "runs_router",
]
