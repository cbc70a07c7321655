"""Pay period registry: period boundaries and the Open → Generated lifecycle."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from campus_payroll.errors import InvalidPeriodError, InvalidStateError, PeriodNotFoundError
from campus_payroll.models import PayPeriod
from campus_payroll.services.state_machine import PeriodStateMachine, PeriodStatus

logger = logging.getLogger(__name__)


class PayPeriodRegistry:
    """Service for creating pay periods and moving them through their lifecycle.

    All methods run inside the caller's session; the caller owns the
    transaction boundary.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def open_period(self, start: date, end: date) -> PayPeriod:
        """Create a new period in Open status."""
        if end < start:
            raise InvalidPeriodError(
                f"Period end {end.isoformat()} is before start {start.isoformat()}"
            )

        period = PayPeriod(start_date=start, end_date=end, status=PeriodStatus.OPEN.value)
        self.session.add(period)
        await self.session.flush()
        logger.info("Opened pay period %s (%s to %s)", period.period_id, start, end)
        return period

    async def get_period(self, period_id: UUID) -> PayPeriod:
        """Load a period or raise PeriodNotFoundError."""
        period = await self.session.get(PayPeriod, period_id)
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    async def list_periods(self, status: str | None = None) -> list[PayPeriod]:
        """List periods, most recent first."""
        query = select(PayPeriod)
        if status:
            query = query.where(PayPeriod.status == status)
        query = query.order_by(PayPeriod.end_date.desc(), PayPeriod.created_at.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def lock_period(self, period_id: UUID) -> PayPeriod:
        """Load a period holding an exclusive row lock until the transaction ends.

        populate_existing makes sure a concurrent writer's committed status is
        seen even if the row is already in the identity map.
        """
        result = await self.session.execute(
            select(PayPeriod)
            .where(PayPeriod.period_id == period_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        period = result.scalar_one_or_none()
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    async def mark_generated(self, period_id: UUID, actor_id: UUID | None = None) -> PayPeriod:
        """Transition Open → Generated with a conditional update.

        Raises InvalidStateError if the period is not currently Open.
        """
        period = await self.get_period(period_id)
        PeriodStateMachine.validate_transition(period.status, PeriodStatus.GENERATED.value)

        generated_at = datetime.now(timezone.utc)
        result = await self.session.execute(
            update(PayPeriod)
            .where(
                PayPeriod.period_id == period_id,
                PayPeriod.status == PeriodStatus.OPEN.value,
            )
            .values(
                status=PeriodStatus.GENERATED.value,
                generated_at=generated_at,
                generated_by=actor_id,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            # Status changed underneath us
            await self.session.refresh(period)
            raise InvalidStateError(
                period.status,
                PeriodStatus.GENERATED.value,
                "Status changed during generation",
            )

        set_committed_value(period, "status", PeriodStatus.GENERATED.value)
        set_committed_value(period, "generated_at", generated_at)
        set_committed_value(period, "generated_by", actor_id)
        return period
