"""Flat-rate monthly pay calculation."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from campus_payroll.calculators.types import PayBreakdown, PayProfile

DEFAULT_TAX_RATE = Decimal("0.20")
MONTHS_PER_YEAR = Decimal("12")
CENTS = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places, half-up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def effective_tax_rate(profile: PayProfile, default_tax_rate: Decimal = DEFAULT_TAX_RATE) -> Decimal:
    """Profile rate if set, otherwise the configured default."""
    if profile.tax_rate is None:
        return default_tax_rate
    return profile.tax_rate


def calculate_monthly_pay(
    profile: PayProfile,
    default_tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> PayBreakdown:
    """Compute one month of pay from an annual salary.

    gross = salary / 12, taxes = gross * rate,
    net = round2(gross - fixed_deductions - taxes).

    Net is rounded from the unrounded intermediates, so it can differ by a
    cent from ``gross - deductions - taxes`` computed on the stored values.
    """
    rate = effective_tax_rate(profile, default_tax_rate)
    monthly_gross = Decimal(profile.base_annual_salary) / MONTHS_PER_YEAR
    taxes = monthly_gross * rate
    deductions = Decimal(profile.fixed_deductions)
    net = monthly_gross - deductions - taxes

    return PayBreakdown(
        gross=round_to_cents(monthly_gross),
        taxes=round_to_cents(taxes),
        deductions=round_to_cents(deductions),
        net=round_to_cents(net),
        tax_rate=rate,
    )
