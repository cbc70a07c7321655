"""Ad-hoc payroll run endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, status

from campus_payroll.api.dependencies import PayrollManager, get_snapshotter
from campus_payroll.api.schemas import (
    ErrorResponse,
    RunCreatedResponse,
    RunDetailResponse,
    RunListResponse,
    RunSummaryResponse,
    RunWithDetailsResponse,
)
from campus_payroll.services.run_snapshotter import RunSnapshotter

router = APIRouter(prefix="/runs", tags=["runs"])

Snapshotter = Annotated[RunSnapshotter, Depends(get_snapshotter)]


@router.post(
    "",
    response_model=RunCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def save_run(
    snapshotter: Snapshotter,
    manager: PayrollManager,
    payload: Annotated[dict[str, Any], Body()],
) -> RunCreatedResponse:
    """Freeze a client-computed payroll run.

    The body is passed through untouched; the snapshotter normalizes field
    names and reports the offending field on malformed input.
    """
    run_id = await snapshotter.save_run(payload, run_by=manager.id)
    return RunCreatedResponse(run_id=run_id)


@router.get(
    "",
    response_model=RunListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_runs(
    snapshotter: Snapshotter,
    manager: PayrollManager,
) -> RunListResponse:
    """List saved runs, most recent period first."""
    runs = await snapshotter.list_runs()
    return RunListResponse(
        items=[RunSummaryResponse.model_validate(r) for r in runs],
        total=len(runs),
    )


@router.get(
    "/{run_id}",
    response_model=RunWithDetailsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_run(
    snapshotter: Snapshotter,
    manager: PayrollManager,
    run_id: Annotated[UUID, Path()],
) -> RunWithDetailsResponse:
    """Get a run with its employee snapshots."""
    run = await snapshotter.get_run(run_id)
    return RunWithDetailsResponse(
        run_summary=RunSummaryResponse.model_validate(run),
        run_details=[RunDetailResponse.model_validate(d) for d in run.details],
    )
