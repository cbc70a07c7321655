"""Institutional branding collaborator for payslips."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_payroll.models import InstitutionSettings

DEFAULT_INSTITUTION_NAME = "ENTERPRISE ERP"
DEFAULT_LOGO_PATH = "/images/default-logo.png"


@dataclass(frozen=True)
class InstitutionBranding:
    """Identity fields printed in a payslip header and footer."""

    name: str
    logo_path: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    board_name: str | None = None
    iso_status: str | None = None
    compliance_id: str | None = None


class BrandingSource(Protocol):
    async def get_branding(self, session: AsyncSession) -> InstitutionBranding:
        ...


class SettingsTableBranding:
    """Reads the institution_settings row, falling back to defaults when absent."""

    def __init__(self, fallback_name: str = DEFAULT_INSTITUTION_NAME):
        self.fallback_name = fallback_name

    async def get_branding(self, session: AsyncSession) -> InstitutionBranding:
        result = await session.execute(
            select(InstitutionSettings).order_by(InstitutionSettings.created_at).limit(1)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return InstitutionBranding(name=self.fallback_name, logo_path=DEFAULT_LOGO_PATH)

        return InstitutionBranding(
            name=row.institution_name or self.fallback_name,
            logo_path=row.logo_path or DEFAULT_LOGO_PATH,
            address=row.address,
            phone=row.phone,
            email=row.email,
            board_name=row.board_name,
            iso_status=row.iso_status,
            compliance_id=row.compliance_id,
        )
