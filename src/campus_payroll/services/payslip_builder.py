"""Payslip view builder: one renderable payload for a payment from either pathway."""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from campus_payroll.calculators.pay_calculator import round_to_cents
from campus_payroll.database import SessionFactory, read_session
from campus_payroll.errors import RecordNotFoundError
from campus_payroll.services.access import MANAGER_CAPABILITY, Requester, ensure_can_view
from campus_payroll.services.branding import (
    BrandingSource,
    InstitutionBranding,
    SettingsTableBranding,
)
from campus_payroll.services.payment_sources import PaymentEntry, PaymentSource, payments_by_id


@dataclass(frozen=True)
class PayslipLine:
    """Single earnings or deductions row."""

    label: str
    amount: Decimal


@dataclass(frozen=True)
class PayslipPayload:
    """Everything a renderer needs to draw a payslip. No further math required."""

    record_id: UUID
    source: PaymentSource
    institution: InstitutionBranding
    employee_id: UUID
    employee_name: str
    department_name: str | None
    period_start: date
    period_end: date
    period_label: str
    earnings: tuple[PayslipLine, ...]
    deductions: tuple[PayslipLine, ...]
    gross_pay: Decimal
    net_pay: Decimal
    status_label: str
    verification_ref: str
    verification_url: str
    generated_at: datetime


def period_label(start: date, end: date) -> str:
    """Month label such as "January 2024", or a date range across months."""
    if (start.year, start.month) == (end.year, end.month):
        return start.strftime("%B %Y")
    return f"{start.strftime('%d %b %Y')} to {end.strftime('%d %b %Y')}"


def compute_verification_ref(payment: PaymentEntry) -> str:
    """Deterministic reference for re-fetching and re-verifying a payslip."""
    canonical = {
        "source": payment.source.value,
        "record_id": str(payment.id),
        "employee_id": str(payment.employee_id),
        "period_start": payment.period_start.isoformat(),
        "period_end": payment.period_end.isoformat(),
        "net_pay": str(round_to_cents(payment.net_pay)),
    }
    json_str = json.dumps(canonical, sort_keys=True)
    return hashlib.sha256(json_str.encode()).hexdigest()[:16].upper()


class PayslipBuilder:
    """Resolves a record id against both pathways and projects it into a payslip.

    Resolution rules for a run id, which is shared by every employee in the
    run: an explicit employee_id wins, then a run with a single detail, then
    the requester's own detail, then (for managers) the first detail by name.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        branding: BrandingSource | None = None,
        manager_capability: str = MANAGER_CAPABILITY,
        verification_base_url: str = "",
    ):
        self.session_factory = session_factory
        self.branding = branding or SettingsTableBranding()
        self.manager_capability = manager_capability
        self.verification_base_url = verification_base_url.rstrip("/")

    async def build_payslip(
        self,
        record_id: UUID,
        requester: Requester,
        employee_id: UUID | None = None,
    ) -> PayslipPayload:
        """Build the payslip payload.

        Raises:
            RecordNotFoundError: id matches nothing (for this employee)
            AccessDeniedError: requester is neither the subject nor a manager
        """
        async with read_session(self.session_factory) as session:
            payments = await payments_by_id(session, record_id)
            payment = self._select_payment(record_id, payments, requester, employee_id)
            ensure_can_view(requester, payment.employee_id, self.manager_capability)
            branding = await self.branding.get_branding(session)

        return self._assemble(payment, branding)

    async def verify_payslip(self, record_id: UUID, employee_id: UUID, reference: str) -> bool:
        """True if the reference matches the stored payment it claims to identify."""
        async with read_session(self.session_factory) as session:
            payments = await payments_by_id(session, record_id)

        for payment in payments:
            if payment.employee_id == employee_id:
                expected = compute_verification_ref(payment)
                return hmac.compare_digest(expected, reference.strip().upper())
        return False

    def _select_payment(
        self,
        record_id: UUID,
        payments: list[PaymentEntry],
        requester: Requester,
        employee_id: UUID | None,
    ) -> PaymentEntry:
        if employee_id is not None:
            matches = [p for p in payments if p.employee_id == employee_id]
        elif len(payments) == 1:
            matches = payments
        else:
            matches = [p for p in payments if p.employee_id == requester.id]
            if not matches and requester.has(self.manager_capability):
                # Managers without a detail of their own get the first one by name
                matches = payments

        if not matches:
            raise RecordNotFoundError(f"Payslip {record_id} not found")
        return matches[0]

    def _assemble(self, payment: PaymentEntry, branding: InstitutionBranding) -> PayslipPayload:
        if payment.source == PaymentSource.FORMAL:
            earnings = (PayslipLine("Basic Salary", round_to_cents(payment.gross_pay)),)
            deductions = (
                PayslipLine("Income Tax", round_to_cents(payment.taxes or Decimal("0"))),
                PayslipLine("Other Deductions", round_to_cents(payment.deductions)),
            )
        else:
            earnings = (PayslipLine("Gross Pay", round_to_cents(payment.gross_pay)),)
            deductions = (PayslipLine("Deductions", round_to_cents(payment.deductions)),)

        reference = compute_verification_ref(payment)
        return PayslipPayload(
            record_id=payment.id,
            source=payment.source,
            institution=branding,
            employee_id=payment.employee_id,
            employee_name=payment.employee_name,
            department_name=payment.department_name,
            period_start=payment.period_start,
            period_end=payment.period_end,
            period_label=period_label(payment.period_start, payment.period_end),
            earnings=earnings,
            deductions=deductions,
            gross_pay=round_to_cents(payment.gross_pay),
            net_pay=round_to_cents(payment.net_pay),
            status_label=payment.status,
            verification_ref=reference,
            verification_url=(
                f"{self.verification_base_url}/api/v1/payslips/{payment.id}/verify"
                f"?employee_id={payment.employee_id}&ref={reference}"
            ),
            generated_at=datetime.now(timezone.utc),
        )
