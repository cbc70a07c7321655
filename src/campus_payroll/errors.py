"""Payroll error taxonomy.

Every error carries a stable ``code`` so the HTTP and CLI layers can map it
to a transport-specific response without inspecting messages.
"""

from __future__ import annotations

from uuid import UUID


class PayrollError(Exception):
    """Base class for all payroll domain errors."""

    code = "PAYROLL_ERROR"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "detail": str(self)}


class PeriodNotFoundError(PayrollError):
    """Raised when a pay period id does not exist."""

    code = "PERIOD_NOT_FOUND"

    def __init__(self, period_id: UUID):
        self.period_id = period_id
        super().__init__(f"Pay period {period_id} not found")


class InvalidStateError(PayrollError):
    """Raised when a pay period status transition is not allowed."""

    code = "INVALID_STATE"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PeriodNotOpenError(InvalidStateError):
    """Raised when generation is attempted on a period that is not Open."""

    code = "PERIOD_NOT_OPEN"

    def __init__(self, period_id: UUID, status: str):
        self.period_id = period_id
        super().__init__(
            status,
            "Generated",
            f"pay period {period_id} has already been processed",
        )


class InvalidPeriodError(PayrollError):
    """Raised when period boundaries are malformed."""

    code = "INVALID_PERIOD"


class NoEligibleEmployeesError(PayrollError):
    """Raised when generation finds nobody to pay."""

    code = "NO_ELIGIBLE_EMPLOYEES"

    def __init__(self, period_id: UUID):
        self.period_id = period_id
        super().__init__(f"No eligible employees to generate payroll for period {period_id}")


class InvalidRunDataError(PayrollError):
    """Raised when an ad-hoc run payload is structurally malformed."""

    code = "INVALID_RUN_DATA"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict[str, str]:
        return {**super().to_dict(), "field": self.field}


class RecordNotFoundError(PayrollError):
    """Raised when a payroll record or run cannot be resolved."""

    code = "RECORD_NOT_FOUND"


class AccessDeniedError(PayrollError):
    """Raised when a requester may not see a payroll record."""

    code = "ACCESS_DENIED"


class TransactionFailure(PayrollError):
    """Raised when the storage layer fails during a write; nothing was applied."""

    code = "TRANSACTION_FAILURE"
