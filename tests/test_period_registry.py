"""Tests for the pay period registry."""

from datetime import date
from uuid import uuid4

import pytest

from campus_payroll.database import read_session, unit_of_work
from campus_payroll.errors import InvalidPeriodError, InvalidStateError, PeriodNotFoundError
from campus_payroll.services.period_registry import PayPeriodRegistry

from tests.conftest import ADMIN_ID

pytestmark = pytest.mark.asyncio


class TestOpenPeriod:
    async def test_new_period_is_open(self, session_factory):
        async with unit_of_work(session_factory) as session:
            period = await PayPeriodRegistry(session).open_period(
                date(2024, 1, 1), date(2024, 1, 31)
            )

        assert period.status == "Open"
        assert period.generated_at is None
        assert period.generated_by is None

    async def test_single_day_period_allowed(self, session_factory):
        async with unit_of_work(session_factory) as session:
            period = await PayPeriodRegistry(session).open_period(
                date(2024, 1, 15), date(2024, 1, 15)
            )
        assert period.start_date == period.end_date

    async def test_end_before_start_rejected(self, session_factory):
        with pytest.raises(InvalidPeriodError):
            async with unit_of_work(session_factory) as session:
                await PayPeriodRegistry(session).open_period(
                    date(2024, 2, 1), date(2024, 1, 31)
                )

        async with read_session(session_factory) as session:
            assert await PayPeriodRegistry(session).list_periods() == []


class TestLookup:
    async def test_unknown_period(self, session_factory):
        with pytest.raises(PeriodNotFoundError) as exc_info:
            async with read_session(session_factory) as session:
                await PayPeriodRegistry(session).get_period(uuid4())
        assert exc_info.value.code == "PERIOD_NOT_FOUND"

    async def test_list_most_recent_first_with_status_filter(self, session_factory, open_period):
        january = await open_period(date(2024, 1, 1), date(2024, 1, 31))
        february = await open_period(date(2024, 2, 1), date(2024, 2, 29))

        async with unit_of_work(session_factory) as session:
            await PayPeriodRegistry(session).mark_generated(january, ADMIN_ID)

        async with read_session(session_factory) as session:
            registry = PayPeriodRegistry(session)
            all_periods = await registry.list_periods()
            open_periods = await registry.list_periods("Open")

        assert [p.period_id for p in all_periods] == [february, january]
        assert [p.period_id for p in open_periods] == [february]


class TestMarkGenerated:
    async def test_transition_records_actor(self, session_factory, open_period):
        period_id = await open_period(date(2024, 1, 1), date(2024, 1, 31))

        async with unit_of_work(session_factory) as session:
            await PayPeriodRegistry(session).mark_generated(period_id, ADMIN_ID)

        async with read_session(session_factory) as session:
            period = await PayPeriodRegistry(session).get_period(period_id)

        assert period.status == "Generated"
        assert period.generated_by == ADMIN_ID
        assert period.generated_at is not None

    async def test_generated_is_terminal(self, session_factory, open_period):
        period_id = await open_period(date(2024, 1, 1), date(2024, 1, 31))

        async with unit_of_work(session_factory) as session:
            await PayPeriodRegistry(session).mark_generated(period_id, ADMIN_ID)

        with pytest.raises(InvalidStateError):
            async with unit_of_work(session_factory) as session:
                await PayPeriodRegistry(session).mark_generated(period_id, ADMIN_ID)
