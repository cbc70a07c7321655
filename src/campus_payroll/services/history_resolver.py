"""Unified payment history across formal records and ad-hoc runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from campus_payroll.database import SessionFactory, read_session
from campus_payroll.services.payment_sources import (
    PaymentEntry,
    PaymentSource,
    payments_for_employee,
)


@dataclass(frozen=True)
class HistoryEntry:
    """One line of an employee's payment history."""

    id: UUID
    source: PaymentSource
    gross_pay: Decimal
    net_pay: Decimal
    period_start: date
    period_end: date
    status: str

    @classmethod
    def from_payment(cls, payment: PaymentEntry) -> HistoryEntry:
        return cls(
            id=payment.id,
            source=payment.source,
            gross_pay=payment.gross_pay,
            net_pay=payment.net_pay,
            period_start=payment.period_start,
            period_end=payment.period_end,
            status=payment.status,
        )


class UnifiedHistoryResolver:
    """Read-only merge of both payroll pathways for one employee."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    async def history_for(self, employee_id: UUID) -> list[HistoryEntry]:
        """Most recent period first; an employee with no payments gets []."""
        async with read_session(self.session_factory) as session:
            payments = await payments_for_employee(session, employee_id)
        return [HistoryEntry.from_payment(payment) for payment in payments]
