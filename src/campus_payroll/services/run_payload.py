"""Normalization and structural validation of ad-hoc run submissions.

Client tools send runs with varying field names (``pay_period_start`` vs
``period_start``, ``user_id`` vs ``employee_id``, flat ``total_*`` fields vs
a ``totals`` object). Everything is folded into one canonical shape here so
the snapshotter only ever sees ``RunSubmission``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator

from campus_payroll.errors import InvalidRunDataError

DEFAULT_RUN_STATUS = "Finalized"

# Match the Numeric(12, 2) detail and Numeric(14, 2) run columns, so figures
# are stored exactly as submitted.
AMOUNT_DIGITS = 12
TOTAL_DIGITS = 14
CENT_PLACES = 2


class RunTotals(BaseModel):
    """Run-level totals as computed by the client."""

    model_config = ConfigDict(populate_by_name=True)

    gross: Decimal = Field(
        ge=0,
        max_digits=TOTAL_DIGITS,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("gross", "total_gross", "total_gross_pay"),
    )
    deductions: Decimal = Field(
        ge=0,
        max_digits=TOTAL_DIGITS,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("deductions", "total_deductions"),
    )
    net: Decimal = Field(
        ge=0,
        max_digits=TOTAL_DIGITS,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("net", "total_net", "total_net_pay"),
    )


class RunDetailInput(BaseModel):
    """One employee's pre-computed figures."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    employee_id: UUID = Field(
        validation_alias=AliasChoices("employee_id", "user_id", "employeeId", "userId")
    )
    full_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("full_name", "fullName", "employee_name"),
    )
    department_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("department_name", "departmentName", "department"),
    )
    days_paid: Decimal | None = Field(
        default=None,
        ge=0,
        max_digits=5,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("days_paid", "daysPaid"),
    )
    gross_pay: Decimal = Field(
        ge=0,
        max_digits=AMOUNT_DIGITS,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("gross_pay", "grossPay"),
    )
    deductions: Decimal = Field(
        ge=0,
        max_digits=AMOUNT_DIGITS,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("deductions", "total_deductions"),
    )
    net_pay: Decimal = Field(
        ge=0,
        max_digits=AMOUNT_DIGITS,
        decimal_places=CENT_PLACES,
        validation_alias=AliasChoices("net_pay", "netPay"),
    )
    payslip_snapshot: dict[str, Any] | None = Field(
        default=None, validation_alias=AliasChoices("payslip_snapshot", "payslipSnapshot")
    )

    def snapshot_json(self) -> dict[str, Any]:
        """The opaque snapshot, converted to JSON-safe values for storage."""
        return self.model_dump(mode="json", include={"payslip_snapshot"})["payslip_snapshot"] or {}


class RunSubmission(BaseModel):
    """Canonical ad-hoc run payload."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    period_start: date = Field(
        validation_alias=AliasChoices("period_start", "pay_period_start", "periodStart")
    )
    period_end: date = Field(
        validation_alias=AliasChoices("period_end", "pay_period_end", "periodEnd")
    )
    status: str = Field(default=DEFAULT_RUN_STATUS, min_length=1)
    totals: RunTotals
    details: list[RunDetailInput] = Field(
        min_length=1, validation_alias=AliasChoices("details", "run_details", "runDetails")
    )

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_totals(cls, data: Any) -> Any:
        """Accept ``total_gross_pay``/``total_deductions``/``total_net_pay`` at top level."""
        if isinstance(data, Mapping) and "totals" not in data:
            flat = {
                key: data[key]
                for key in ("total_gross_pay", "total_deductions", "total_net_pay")
                if key in data
            }
            if flat:
                return {**data, "totals": flat}
        return data


def _field_path(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "payload"


def normalize_run_payload(data: Mapping[str, Any] | RunSubmission) -> RunSubmission:
    """Validate a run payload once and return its canonical form.

    Raises InvalidRunDataError naming the first offending field.
    """
    if isinstance(data, RunSubmission):
        submission = data
    else:
        try:
            submission = RunSubmission.model_validate(data)
        except ValidationError as exc:
            error = exc.errors()[0]
            raise InvalidRunDataError(_field_path(error["loc"]), error["msg"]) from exc

    if submission.period_end < submission.period_start:
        raise InvalidRunDataError("period_end", "must not be before period_start")

    seen: set[UUID] = set()
    for index, detail in enumerate(submission.details):
        if detail.employee_id in seen:
            raise InvalidRunDataError(
                f"details.{index}.employee_id",
                f"employee {detail.employee_id} appears more than once in the run",
            )
        seen.add(detail.employee_id)

    return submission
