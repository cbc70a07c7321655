"""Tests for ad-hoc run snapshots."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import event, func, select, update
from sqlalchemy.exc import IntegrityError

from campus_payroll.database import read_session, unit_of_work
from campus_payroll.errors import InvalidRunDataError, RecordNotFoundError, TransactionFailure
from campus_payroll.models import EmployeePayProfile, PayrollRunDetail
from campus_payroll.services.period_registry import PayPeriodRegistry
from campus_payroll.services.run_snapshotter import RunSnapshotter

from tests.conftest import ADMIN_ID, run_detail, run_payload

pytestmark = pytest.mark.asyncio


async def count_details(session_factory) -> int:
    async with read_session(session_factory) as session:
        result = await session.execute(select(func.count()).select_from(PayrollRunDetail))
        return result.scalar_one()


class TestSaveRun:
    """Test freezing a run."""

    async def test_canonical_payload(self, session_factory, add_employee):
        alice = await add_employee("Alice")
        bob = await add_employee("Bob")
        snapshotter = RunSnapshotter(session_factory)

        run_id = await snapshotter.save_run(
            run_payload([run_detail(alice, "Alice"), run_detail(bob, "Bob", "6000", "600", "5400")]),
            run_by=ADMIN_ID,
        )

        run = await snapshotter.get_run(run_id)
        assert run.period_start == date(2024, 2, 1)
        assert run.period_end == date(2024, 2, 15)
        assert run.status == "Finalized"
        assert run.total_gross == Decimal("11000")
        assert run.total_net == Decimal("9900")
        assert run.run_by == ADMIN_ID
        assert [d.full_name for d in run.details] == ["Alice", "Bob"]
        assert run.details[1].net_pay == Decimal("5400")

    async def test_figures_stored_as_given(self, session_factory, add_employee):
        """Supplied numbers are frozen even when they do not add up."""
        alice = await add_employee("Alice")
        snapshotter = RunSnapshotter(session_factory)

        run_id = await snapshotter.save_run(
            run_payload([run_detail(alice, "Alice", "5000", "500", "4000")]),
            run_by=ADMIN_ID,
        )

        run = await snapshotter.get_run(run_id)
        assert run.details[0].net_pay == Decimal("4000")

    async def test_legacy_field_names(self, session_factory, add_employee):
        """Older clients send pay_period_*, flat total_* fields, run_details and user_id."""
        alice = await add_employee("Alice")
        snapshotter = RunSnapshotter(session_factory)

        run_id = await snapshotter.save_run(
            {
                "pay_period_start": "2024-03-01",
                "pay_period_end": "2024-03-31",
                "total_gross_pay": "5000",
                "total_deductions": "500",
                "total_net_pay": "4500",
                "run_details": [
                    {
                        "user_id": str(alice),
                        "full_name": "Alice",
                        "gross_pay": "5000",
                        "deductions": "500",
                        "net_pay": "4500",
                    }
                ],
            },
            run_by=ADMIN_ID,
        )

        run = await snapshotter.get_run(run_id)
        assert run.period_end == date(2024, 3, 31)
        assert run.total_gross == Decimal("5000")
        assert run.details[0].employee_id == alice
        assert run.details[0].payslip_snapshot == {}

    async def test_snapshot_kept_verbatim(self, session_factory, add_employee):
        alice = await add_employee("Alice")
        snapshot = {"basic": 4000, "allowances": {"hra": 1000}, "notes": "half month"}
        snapshotter = RunSnapshotter(session_factory)

        run_id = await snapshotter.save_run(
            run_payload([run_detail(alice, "Alice", payslip_snapshot=snapshot)]),
            run_by=ADMIN_ID,
        )

        run = await snapshotter.get_run(run_id)
        assert run.details[0].payslip_snapshot == snapshot

    async def test_resubmission_creates_second_run(self, session_factory, add_employee):
        alice = await add_employee("Alice")
        payload = run_payload([run_detail(alice, "Alice")])
        snapshotter = RunSnapshotter(session_factory)

        first = await snapshotter.save_run(payload, run_by=ADMIN_ID)
        second = await snapshotter.save_run(payload, run_by=ADMIN_ID)

        assert first != second
        assert len(await snapshotter.list_runs()) == 2

    async def test_pay_periods_untouched(self, session_factory, add_employee, open_period):
        """Freezing a run over a period's dates leaves the period Open."""
        alice = await add_employee("Alice")
        period_id = await open_period(date(2024, 2, 1), date(2024, 2, 29))

        await RunSnapshotter(session_factory).save_run(
            run_payload([run_detail(alice, "Alice")]), run_by=ADMIN_ID
        )

        async with read_session(session_factory) as session:
            period = await PayPeriodRegistry(session).get_period(period_id)
        assert period.status == "Open"


class TestSnapshotImmutability:
    async def test_profile_edit_does_not_change_run(self, session_factory, add_employee):
        """Stored details keep the submitted figures after the pay profile changes."""
        alice = await add_employee("Alice", salary="120000")
        snapshotter = RunSnapshotter(session_factory)
        run_id = await snapshotter.save_run(
            run_payload([run_detail(alice, "Alice", "5000.00", "1000.00", "4000.00")]),
            run_by=ADMIN_ID,
        )

        async with unit_of_work(session_factory) as session:
            await session.execute(
                update(EmployeePayProfile)
                .where(EmployeePayProfile.employee_id == alice)
                .values(base_annual_salary=Decimal("240000"))
            )

        run = await snapshotter.get_run(run_id)
        assert run.details[0].gross_pay == Decimal("5000.00")
        assert run.details[0].net_pay == Decimal("4000.00")
        assert run.total_net == Decimal("4000.00")


class TestValidation:
    """Malformed payloads are rejected with the offending field and write nothing."""

    async def assert_rejected(self, session_factory, payload, field):
        snapshotter = RunSnapshotter(session_factory)
        with pytest.raises(InvalidRunDataError) as exc_info:
            await snapshotter.save_run(payload, run_by=ADMIN_ID)

        assert exc_info.value.field == field
        assert exc_info.value.code == "INVALID_RUN_DATA"
        assert await snapshotter.list_runs() == []
        return exc_info.value

    async def test_missing_detail_field(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice"), run_detail(uuid4(), "Bob")])
        del payload["details"][1]["gross_pay"]

        await self.assert_rejected(session_factory, payload, "details.1.gross_pay")

    async def test_negative_amount(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice")])
        payload["details"][0]["net_pay"] = "-1"
        await self.assert_rejected(session_factory, payload, "details.0.net_pay")

    async def test_non_numeric_amount(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice")])
        payload["details"][0]["gross_pay"] = "lots"
        await self.assert_rejected(session_factory, payload, "details.0.gross_pay")

    async def test_missing_period(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice")])
        del payload["period_start"]
        await self.assert_rejected(session_factory, payload, "period_start")

    async def test_inverted_period(self, session_factory):
        payload = run_payload(
            [run_detail(uuid4(), "Alice")], period_start="2024-02-15", period_end="2024-02-01"
        )
        await self.assert_rejected(session_factory, payload, "period_end")

    async def test_empty_details(self, session_factory):
        payload = run_payload([])
        await self.assert_rejected(session_factory, payload, "details")

    async def test_sub_cent_amount(self, session_factory):
        """Figures are frozen as given, so a third decimal place is refused rather than rounded."""
        payload = run_payload([run_detail(uuid4(), "Alice")])
        payload["details"][0]["net_pay"] = "4000.005"
        await self.assert_rejected(session_factory, payload, "details.0.net_pay")

    async def test_amount_too_large_for_storage(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice")])
        payload["details"][0]["gross_pay"] = "1e15"
        await self.assert_rejected(session_factory, payload, "details.0.gross_pay")

    async def test_total_too_large_for_storage(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice")])
        payload["totals"]["gross"] = "1000000000000000"
        await self.assert_rejected(session_factory, payload, "totals.gross")

    async def test_fractional_days_beyond_cents(self, session_factory):
        payload = run_payload([run_detail(uuid4(), "Alice")])
        payload["details"][0]["days_paid"] = "14.555"
        await self.assert_rejected(session_factory, payload, "details.0.days_paid")

    async def test_duplicate_employee(self, session_factory):
        employee_id = uuid4()
        payload = run_payload([run_detail(employee_id, "Alice"), run_detail(employee_id, "Alice")])
        error = await self.assert_rejected(session_factory, payload, "details.1.employee_id")
        assert error.to_dict()["field"] == "details.1.employee_id"


class TestAtomicity:
    async def test_failed_detail_insert_discards_header(self, session_factory, add_employee):
        alice = await add_employee("Alice")
        bob = await add_employee("Bob")
        snapshotter = RunSnapshotter(session_factory)

        def fail_for_bob(mapper, connection, target):
            if target.employee_id == bob:
                raise IntegrityError("INSERT INTO payroll_run_detail", {}, Exception("simulated"))

        event.listen(PayrollRunDetail, "before_insert", fail_for_bob)
        try:
            with pytest.raises(TransactionFailure):
                await snapshotter.save_run(
                    run_payload([run_detail(alice, "Alice"), run_detail(bob, "Bob")]),
                    run_by=ADMIN_ID,
                )
        finally:
            event.remove(PayrollRunDetail, "before_insert", fail_for_bob)

        assert await snapshotter.list_runs() == []
        assert await count_details(session_factory) == 0


class TestReads:
    async def test_list_most_recent_period_first(self, session_factory, add_employee):
        alice = await add_employee("Alice")
        snapshotter = RunSnapshotter(session_factory)
        march = await snapshotter.save_run(
            run_payload([run_detail(alice, "Alice")], "2024-03-01", "2024-03-15"), run_by=ADMIN_ID
        )
        january = await snapshotter.save_run(
            run_payload([run_detail(alice, "Alice")], "2024-01-01", "2024-01-15"), run_by=ADMIN_ID
        )

        runs = await snapshotter.list_runs()
        assert [r.run_id for r in runs] == [march, january]

    async def test_unknown_run(self, session_factory):
        with pytest.raises(RecordNotFoundError):
            await RunSnapshotter(session_factory).get_run(uuid4())
