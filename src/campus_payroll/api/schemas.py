"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from campus_payroll.services.payment_sources import PaymentSource


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(BaseModel):
    """Tagged error body."""

    detail: str
    code: str
    field: str | None = None


# ============================================================================
# Pay Period schemas
# ============================================================================


class PeriodCreate(BaseModel):
    """Schema for opening a new pay period."""

    start_date: date
    end_date: date


class PeriodResponse(BaseModel):
    """Schema for pay period response."""

    model_config = ConfigDict(from_attributes=True)

    period_id: UUID
    start_date: date
    end_date: date
    status: str
    generated_at: datetime | None = None
    generated_by: UUID | None = None
    created_at: datetime


class PeriodListResponse(BaseModel):
    """Schema for listing pay periods."""

    items: list[PeriodResponse]
    total: int


# ============================================================================
# Formal record schemas
# ============================================================================


class PayrollRecordResponse(BaseModel):
    """Schema for a generated payroll record."""

    model_config = ConfigDict(from_attributes=True)

    record_id: UUID
    employee_id: UUID
    period_id: UUID
    gross_pay: Decimal
    taxes: Decimal
    deductions: Decimal
    net_pay: Decimal
    tax_rate: Decimal
    status: str
    generated_by: UUID
    created_at: datetime


class GenerateResponse(BaseModel):
    """Schema for a completed generation."""

    period_id: UUID
    status: str
    records_created: int
    records: list[PayrollRecordResponse]


class PayrollRecordListResponse(BaseModel):
    """Schema for listing the records of a period."""

    items: list[PayrollRecordResponse]
    total: int


# ============================================================================
# Ad-hoc run schemas
# ============================================================================


class RunCreatedResponse(BaseModel):
    """Schema for a saved run."""

    run_id: UUID
    message: str = "Payroll run saved successfully"


class RunSummaryResponse(BaseModel):
    """Schema for a run header."""

    model_config = ConfigDict(from_attributes=True)

    run_id: UUID
    period_start: date
    period_end: date
    status: str
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    run_by: UUID
    run_date: datetime


class RunDetailResponse(BaseModel):
    """Schema for one employee snapshot inside a run."""

    model_config = ConfigDict(from_attributes=True)

    detail_id: UUID
    employee_id: UUID
    full_name: str
    department_name: str | None = None
    days_paid: Decimal | None = None
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    payslip_snapshot: dict


class RunListResponse(BaseModel):
    """Schema for listing runs."""

    items: list[RunSummaryResponse]
    total: int


class RunWithDetailsResponse(BaseModel):
    """Schema for a run with its per-employee snapshots."""

    run_summary: RunSummaryResponse
    run_details: list[RunDetailResponse]


# ============================================================================
# Employee schemas
# ============================================================================


class PayConfigResponse(BaseModel):
    """Schema for one row of the payroll configuration overview."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    full_name: str
    role: str
    department_name: str | None = None
    base_annual_salary: Decimal
    fixed_deductions: Decimal
    tax_rate: Decimal | None = None
    allowance_hra: Decimal
    allowance_da: Decimal
    allowance_other: Decimal
    bonus_target: Decimal


class PayConfigListResponse(BaseModel):
    items: list[PayConfigResponse]
    total: int


class HistoryEntryResponse(BaseModel):
    """Schema for one payment history line."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    source: PaymentSource
    gross_pay: Decimal
    net_pay: Decimal
    period_start: date
    period_end: date
    status: str


class HistoryResponse(BaseModel):
    employee_id: UUID
    items: list[HistoryEntryResponse]


# ============================================================================
# Payslip schemas
# ============================================================================


class BrandingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    logo_path: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    board_name: str | None = None
    iso_status: str | None = None
    compliance_id: str | None = None


class PayslipLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    amount: Decimal


class PayslipResponse(BaseModel):
    """Schema for a renderable payslip."""

    model_config = ConfigDict(from_attributes=True)

    record_id: UUID
    source: PaymentSource
    institution: BrandingResponse
    employee_id: UUID
    employee_name: str
    department_name: str | None = None
    period_start: date
    period_end: date
    period_label: str
    earnings: list[PayslipLineResponse]
    deductions: list[PayslipLineResponse]
    gross_pay: Decimal
    net_pay: Decimal
    status_label: str
    verification_ref: str
    verification_url: str
    generated_at: datetime


class VerifyResponse(BaseModel):
    record_id: UUID
    employee_id: UUID
    valid: bool
