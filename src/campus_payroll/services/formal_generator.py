"""Formal generator: one payroll record per eligible employee, once per period."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from campus_payroll.calculators.pay_calculator import DEFAULT_TAX_RATE, calculate_monthly_pay
from campus_payroll.database import SessionFactory, read_session, unit_of_work
from campus_payroll.errors import NoEligibleEmployeesError, PeriodNotOpenError
from campus_payroll.models import PayPeriod, PayrollRecord
from campus_payroll.services.directory import (
    EligibleEmployee,
    EmployeeDirectory,
    SqlEmployeeDirectory,
)
from campus_payroll.services.period_registry import PayPeriodRegistry
from campus_payroll.services.state_machine import PeriodStateMachine

logger = logging.getLogger(__name__)

RECORD_STATUS_GENERATED = "Generated"


class FormalGenerator:
    """Batch payroll generation for a pay period.

    Key invariants:
    1. At most one successful generation per period (row lock + Open check
       + conditional status update, all in one transaction)
    2. All-or-nothing: the status flip and every record insert commit
       together or not at all
    3. Records hold copied values; later profile edits never change them
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        directory: EmployeeDirectory | None = None,
        default_tax_rate: Decimal = DEFAULT_TAX_RATE,
    ):
        self.session_factory = session_factory
        self.directory = directory or SqlEmployeeDirectory()
        self.default_tax_rate = default_tax_rate

    async def generate(self, period_id: UUID, actor_id: UUID) -> list[PayrollRecord]:
        """Generate payroll records for every eligible employee.

        Raises:
            PeriodNotFoundError: unknown period
            PeriodNotOpenError: period already generated
            NoEligibleEmployeesError: nobody to pay
            TransactionFailure: storage error; nothing was written
        """
        async with unit_of_work(self.session_factory) as session:
            registry = PayPeriodRegistry(session)

            # Concurrent callers queue here until the holder commits or rolls back
            period = await registry.lock_period(period_id)
            if not PeriodStateMachine.can_generate(period.status):
                logger.warning(
                    "Refused generation for pay period %s in status %s",
                    period_id,
                    period.status,
                )
                raise PeriodNotOpenError(period_id, period.status)

            employees = await self.directory.list_eligible_employees(session)
            if not employees:
                raise NoEligibleEmployeesError(period_id)

            records = [
                self._build_record(period, employee, actor_id) for employee in employees
            ]
            session.add_all(records)
            await session.flush()

            await registry.mark_generated(period_id, actor_id)

        logger.info(
            "Generated %d payroll records for pay period %s (actor %s)",
            len(records),
            period_id,
            actor_id,
        )
        return records

    async def records_for_period(self, period_id: UUID) -> list[PayrollRecord]:
        """List the records generated for a period."""
        async with read_session(self.session_factory) as session:
            await PayPeriodRegistry(session).get_period(period_id)
            result = await session.execute(
                select(PayrollRecord)
                .where(PayrollRecord.period_id == period_id)
                .order_by(PayrollRecord.created_at, PayrollRecord.record_id)
            )
            return list(result.scalars().all())

    def _build_record(
        self,
        period: PayPeriod,
        employee: EligibleEmployee,
        actor_id: UUID,
    ) -> PayrollRecord:
        breakdown = calculate_monthly_pay(employee.pay_profile, self.default_tax_rate)
        return PayrollRecord(
            employee_id=employee.employee_id,
            period_id=period.period_id,
            gross_pay=breakdown.gross,
            taxes=breakdown.taxes,
            deductions=breakdown.deductions,
            net_pay=breakdown.net,
            tax_rate=breakdown.tax_rate,
            status=RECORD_STATUS_GENERATED,
            generated_by=actor_id,
        )
