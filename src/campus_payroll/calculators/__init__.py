"""Payroll calculation."""

from campus_payroll.calculators.pay_calculator import (
    DEFAULT_TAX_RATE,
    calculate_monthly_pay,
    effective_tax_rate,
    round_to_cents,
)
from campus_payroll.calculators.types import Allowances, PayBreakdown, PayProfile

__all__ = [
    "DEFAULT_TAX_RATE",
    "calculate_monthly_pay",
    "effective_tax_rate",
    "round_to_cents",
    "Allowances",
    "PayBreakdown",
    "PayProfile",
]
