"""Pytest fixtures for campus payroll tests.

Every test gets its own SQLite file so concurrent sessions see real
cross-connection locking.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from campus_payroll.api.app import create_app
from campus_payroll.config import Settings
from campus_payroll.database import (
    SessionFactory,
    create_schema,
    get_engine,
    get_session_factory,
    unit_of_work,
)
from campus_payroll.models import Employee, EmployeePayProfile, InstitutionSettings
from campus_payroll.services.access import ADMIN_CAPABILITY, MANAGER_CAPABILITY, Requester
from campus_payroll.services.period_registry import PayPeriodRegistry

ADMIN_ID = UUID("00000000-0000-0000-0000-0000000000a1")


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}"


@pytest.fixture
def settings(database_url: str) -> Settings:
    """Settings pinned for tests; nothing is read from the environment."""
    return Settings(
        database_url=database_url,
        default_tax_rate=Decimal("0.20"),
        eligible_roles=("Teacher", "Admin"),
        manager_capability=MANAGER_CAPABILITY,
        admin_capability=ADMIN_CAPABILITY,
        verification_base_url="http://payroll.test",
        institution_name="ENTERPRISE ERP",
        log_level="INFO",
        host="127.0.0.1",
        port=8000,
        debug=False,
    )


@pytest_asyncio.fixture
async def engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with the full schema."""
    engine = get_engine(database_url)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    return get_session_factory(engine)


@pytest_asyncio.fixture
async def client(
    settings: Settings, session_factory: SessionFactory
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app sharing the test database."""
    app = create_app(settings, session_factory)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin() -> Requester:
    return Requester(id=ADMIN_ID, capabilities=frozenset({ADMIN_CAPABILITY, MANAGER_CAPABILITY}))


@pytest.fixture
def manager() -> Requester:
    return Requester(id=uuid4(), capabilities=frozenset({MANAGER_CAPABILITY}))


@pytest.fixture
def add_employee(session_factory: SessionFactory):
    """Factory creating an employee, with a pay profile when a salary is given."""

    async def _add(
        full_name: str,
        role: str = "Teacher",
        salary: str | None = "120000",
        fixed_deductions: str = "0",
        tax_rate: str | None = None,
        department: str | None = "Science",
    ) -> UUID:
        async with unit_of_work(session_factory) as session:
            employee = Employee(full_name=full_name, role=role, department_name=department)
            session.add(employee)
            await session.flush()
            if salary is not None:
                session.add(
                    EmployeePayProfile(
                        employee_id=employee.employee_id,
                        base_annual_salary=Decimal(salary),
                        fixed_deductions=Decimal(fixed_deductions),
                        tax_rate=None if tax_rate is None else Decimal(tax_rate),
                    )
                )
            employee_id = employee.employee_id
        return employee_id

    return _add


@pytest.fixture
def open_period(session_factory: SessionFactory):
    """Factory opening a pay period and returning its id."""

    async def _open(start: date, end: date) -> UUID:
        async with unit_of_work(session_factory) as session:
            period = await PayPeriodRegistry(session).open_period(start, end)
            period_id = period.period_id
        return period_id

    return _open


@pytest.fixture
def add_branding(session_factory: SessionFactory):
    async def _add(**fields: Any) -> None:
        async with unit_of_work(session_factory) as session:
            session.add(InstitutionSettings(**fields))

    return _add


def run_payload(
    details: list[dict[str, Any]],
    period_start: str = "2024-02-01",
    period_end: str = "2024-02-15",
    status: str = "Finalized",
) -> dict[str, Any]:
    """Canonical ad-hoc run body with totals summed from the details."""
    return {
        "period_start": period_start,
        "period_end": period_end,
        "status": status,
        "totals": {
            "gross": str(sum(Decimal(d["gross_pay"]) for d in details)),
            "deductions": str(sum(Decimal(d["deductions"]) for d in details)),
            "net": str(sum(Decimal(d["net_pay"]) for d in details)),
        },
        "details": details,
    }


def run_detail(
    employee_id: UUID,
    full_name: str,
    gross_pay: str = "5000.00",
    deductions: str = "500.00",
    net_pay: str = "4500.00",
    **extra: Any,
) -> dict[str, Any]:
    return {
        "employee_id": str(employee_id),
        "full_name": full_name,
        "department_name": "Science",
        "days_paid": "15",
        "gross_pay": gross_pay,
        "deductions": deductions,
        "net_pay": net_pay,
        **extra,
    }
