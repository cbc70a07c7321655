"""Pay period state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from campus_payroll.errors import InvalidStateError


class PeriodStatus(str, Enum):
    """Pay period status values."""

    OPEN = "Open"
    GENERATED = "Generated"


class PeriodStateMachine:
    """State machine for pay period status transitions.

    Allowed transitions:
    - Open → Generated
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PeriodStatus.OPEN.value: [PeriodStatus.GENERATED.value],
        PeriodStatus.GENERATED.value: [],  # Terminal state
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidStateError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateError(from_status, to_status)

    @classmethod
    def can_generate(cls, status: str) -> bool:
        """Check if formal generation may run in this status."""
        return status == PeriodStatus.OPEN.value
