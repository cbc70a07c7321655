"""Pay period and formal generation endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from campus_payroll.api.dependencies import (
    PayrollAdmin,
    PayrollManager,
    Sessions,
    get_generator,
)
from campus_payroll.api.schemas import (
    ErrorResponse,
    GenerateResponse,
    PayrollRecordListResponse,
    PayrollRecordResponse,
    PeriodCreate,
    PeriodListResponse,
    PeriodResponse,
)
from campus_payroll.database import read_session, unit_of_work
from campus_payroll.services.formal_generator import FormalGenerator
from campus_payroll.services.period_registry import PayPeriodRegistry
from campus_payroll.services.state_machine import PeriodStatus

router = APIRouter(prefix="/periods", tags=["periods"])

Generator = Annotated[FormalGenerator, Depends(get_generator)]


# ============================================================================
# Pay Period CRUD
# ============================================================================


@router.post(
    "",
    response_model=PeriodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def open_period(
    sessions: Sessions,
    admin: PayrollAdmin,
    payload: PeriodCreate,
) -> PeriodResponse:
    """Open a new pay period."""
    async with unit_of_work(sessions) as session:
        period = await PayPeriodRegistry(session).open_period(
            payload.start_date, payload.end_date
        )
    return PeriodResponse.model_validate(period)


@router.get(
    "",
    response_model=PeriodListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_periods(
    sessions: Sessions,
    manager: PayrollManager,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> PeriodListResponse:
    """List pay periods, most recent first."""
    async with read_session(sessions) as session:
        periods = await PayPeriodRegistry(session).list_periods(status_filter)

    return PeriodListResponse(
        items=[PeriodResponse.model_validate(p) for p in periods],
        total=len(periods),
    )


@router.get(
    "/{period_id}",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_period(
    sessions: Sessions,
    manager: PayrollManager,
    period_id: Annotated[UUID, Path()],
) -> PeriodResponse:
    """Get a specific pay period by ID."""
    async with read_session(sessions) as session:
        period = await PayPeriodRegistry(session).get_period(period_id)
    return PeriodResponse.model_validate(period)


# ============================================================================
# Formal generation
# ============================================================================


@router.post(
    "/{period_id}/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def generate_payroll(
    generator: Generator,
    admin: PayrollAdmin,
    period_id: Annotated[UUID, Path()],
) -> GenerateResponse:
    """Generate payroll records for every eligible employee. Runs once per period."""
    records = await generator.generate(period_id, admin.id)
    return GenerateResponse(
        period_id=period_id,
        status=PeriodStatus.GENERATED.value,
        records_created=len(records),
        records=[PayrollRecordResponse.model_validate(r) for r in records],
    )


@router.get(
    "/{period_id}/records",
    response_model=PayrollRecordListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_period_records(
    generator: Generator,
    manager: PayrollManager,
    period_id: Annotated[UUID, Path()],
) -> PayrollRecordListResponse:
    """List the records generated for a period."""
    records = await generator.records_for_period(period_id)
    return PayrollRecordListResponse(
        items=[PayrollRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )
