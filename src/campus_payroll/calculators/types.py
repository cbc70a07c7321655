"""Type definitions for the pay calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class Allowances:
    """Profile allowances. Carried for reporting; not part of the flat-rate model."""

    hra: Decimal = Decimal("0")
    da: Decimal = Decimal("0")
    other: Decimal = Decimal("0")


@dataclass(frozen=True)
class PayProfile:
    """Value copy of an employee's pay profile, taken when it is read."""

    employee_id: UUID
    base_annual_salary: Decimal
    fixed_deductions: Decimal = Decimal("0")
    tax_rate: Decimal | None = None  # None = use the configured default
    allowances: Allowances = field(default_factory=Allowances)
    bonus_target: Decimal = Decimal("0")


@dataclass(frozen=True)
class PayBreakdown:
    """Result of one employee's monthly calculation, rounded to cents."""

    gross: Decimal
    taxes: Decimal
    deductions: Decimal
    net: Decimal
    tax_rate: Decimal
