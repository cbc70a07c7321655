"""Employee payroll configuration and payment history endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from campus_payroll.api.dependencies import (
    AppSettings,
    CurrentRequester,
    PayrollManager,
    Sessions,
    get_history_resolver,
)
from campus_payroll.api.schemas import (
    ErrorResponse,
    HistoryEntryResponse,
    HistoryResponse,
    PayConfigListResponse,
    PayConfigResponse,
)
from campus_payroll.database import read_session
from campus_payroll.services.access import ensure_can_view
from campus_payroll.services.history_resolver import UnifiedHistoryResolver
from campus_payroll.services.pay_profiles import PayProfileStore

router = APIRouter(tags=["employees"])

HistoryResolver = Annotated[UnifiedHistoryResolver, Depends(get_history_resolver)]


@router.get(
    "/employees/pay-config",
    response_model=PayConfigListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_pay_config(
    sessions: Sessions,
    manager: PayrollManager,
) -> PayConfigListResponse:
    """Payroll configuration of every staff member with a pay profile."""
    async with read_session(sessions) as session:
        configs = await PayProfileStore(session).list_profiles()

    return PayConfigListResponse(
        items=[PayConfigResponse.model_validate(c) for c in configs],
        total=len(configs),
    )


@router.get(
    "/employees/{employee_id}/history",
    response_model=HistoryResponse,
    responses={403: {"model": ErrorResponse}},
)
async def employee_history(
    resolver: HistoryResolver,
    requester: CurrentRequester,
    settings: AppSettings,
    employee_id: Annotated[UUID, Path()],
) -> HistoryResponse:
    """Unified payment history of one employee."""
    ensure_can_view(requester, employee_id, settings.manager_capability)
    entries = await resolver.history_for(employee_id)
    return HistoryResponse(
        employee_id=employee_id,
        items=[HistoryEntryResponse.model_validate(e) for e in entries],
    )


@router.get("/me/history", response_model=HistoryResponse)
async def my_history(
    resolver: HistoryResolver,
    requester: CurrentRequester,
) -> HistoryResponse:
    """The requester's own payment history from both pathways."""
    entries = await resolver.history_for(requester.id)
    return HistoryResponse(
        employee_id=requester.id,
        items=[HistoryEntryResponse.model_validate(e) for e in entries],
    )
