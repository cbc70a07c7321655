"""Payslip endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from campus_payroll.api.dependencies import CurrentRequester, get_payslip_builder
from campus_payroll.api.schemas import ErrorResponse, PayslipResponse, VerifyResponse
from campus_payroll.services.payslip_builder import PayslipBuilder

router = APIRouter(prefix="/payslips", tags=["payslips"])

Builder = Annotated[PayslipBuilder, Depends(get_payslip_builder)]


@router.get(
    "/{record_id}",
    response_model=PayslipResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_payslip(
    builder: Builder,
    requester: CurrentRequester,
    record_id: Annotated[UUID, Path()],
    employee_id: UUID | None = None,
) -> PayslipResponse:
    """Payslip for a formal record id or a run id.

    For a run id, ``employee_id`` picks the employee; it defaults to the
    requester.
    """
    payslip = await builder.build_payslip(record_id, requester, employee_id)
    return PayslipResponse.model_validate(payslip)


@router.get("/{record_id}/verify", response_model=VerifyResponse)
async def verify_payslip(
    builder: Builder,
    record_id: Annotated[UUID, Path()],
    employee_id: UUID,
    ref: Annotated[str, Query(min_length=1)],
) -> VerifyResponse:
    """Public check that a printed verification reference matches stored data."""
    valid = await builder.verify_payslip(record_id, employee_id, ref)
    return VerifyResponse(record_id=record_id, employee_id=employee_id, valid=valid)
