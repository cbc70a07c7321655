"""Requester identity and the "subject or manager" access rule."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from campus_payroll.errors import AccessDeniedError

MANAGER_CAPABILITY = "payroll:manage"
ADMIN_CAPABILITY = "payroll:admin"


@dataclass(frozen=True)
class Requester:
    """Authenticated caller, as supplied by the auth collaborator."""

    id: UUID
    capabilities: frozenset[str] = field(default_factory=frozenset)

    def has(self, capability: str) -> bool:
        return capability in self.capabilities


def ensure_can_view(
    requester: Requester,
    subject_employee_id: UUID,
    manager_capability: str = MANAGER_CAPABILITY,
) -> None:
    """Allow the subject employee or a payroll manager; deny everyone else."""
    if requester.id == subject_employee_id or requester.has(manager_capability):
        return
    raise AccessDeniedError(
        f"Requester {requester.id} may not view payroll data of employee {subject_employee_id}"
    )
