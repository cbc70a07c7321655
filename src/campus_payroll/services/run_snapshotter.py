"""Ad-hoc run snapshotter: freezes client-computed payroll runs."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from campus_payroll.database import SessionFactory, read_session, unit_of_work
from campus_payroll.errors import RecordNotFoundError
from campus_payroll.models import PayrollRun, PayrollRunDetail
from campus_payroll.services.run_payload import RunSubmission, normalize_run_payload

logger = logging.getLogger(__name__)


class RunSnapshotter:
    """Persists a pre-computed run and its per-employee breakdown.

    Figures are trusted and stored as given; only the payload structure is
    validated. A run header and all its details are written in one
    transaction and never modified afterwards. Resubmitting the same payload
    creates a second, independent run.
    """

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    async def save_run(
        self,
        payload: Mapping[str, Any] | RunSubmission,
        run_by: UUID,
    ) -> UUID:
        """Freeze a run. Returns the new run_id.

        Raises:
            InvalidRunDataError: malformed payload, nothing written
            TransactionFailure: storage error, nothing written
        """
        submission = normalize_run_payload(payload)

        async with unit_of_work(self.session_factory) as session:
            run = PayrollRun(
                period_start=submission.period_start,
                period_end=submission.period_end,
                status=submission.status,
                total_gross=submission.totals.gross,
                total_deductions=submission.totals.deductions,
                total_net=submission.totals.net,
                run_by=run_by,
            )
            session.add(run)
            await session.flush()

            session.add_all(
                PayrollRunDetail(
                    run_id=run.run_id,
                    employee_id=detail.employee_id,
                    full_name=detail.full_name,
                    department_name=detail.department_name,
                    days_paid=detail.days_paid,
                    gross_pay=detail.gross_pay,
                    deductions=detail.deductions,
                    net_pay=detail.net_pay,
                    payslip_snapshot=detail.snapshot_json(),
                )
                for detail in submission.details
            )
            await session.flush()
            run_id = run.run_id

        logger.info(
            "Saved payroll run %s (%s to %s, %d employees, by %s)",
            run_id,
            submission.period_start,
            submission.period_end,
            len(submission.details),
            run_by,
        )
        return run_id

    async def list_runs(self) -> list[PayrollRun]:
        """Saved runs, most recent period first."""
        async with read_session(self.session_factory) as session:
            result = await session.execute(
                select(PayrollRun).order_by(
                    PayrollRun.period_start.desc(),
                    PayrollRun.run_date.desc(),
                )
            )
            return list(result.scalars().all())

    async def get_run(self, run_id: UUID) -> PayrollRun:
        """A run with its details loaded, or RecordNotFoundError."""
        async with read_session(self.session_factory) as session:
            result = await session.execute(
                select(PayrollRun)
                .where(PayrollRun.run_id == run_id)
                .options(selectinload(PayrollRun.details))
            )
            run = result.scalar_one_or_none()
            if run is None:
                raise RecordNotFoundError(f"Payroll run {run_id} not found")
            return run
