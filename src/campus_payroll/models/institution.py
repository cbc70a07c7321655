"""Institutional identity and branding settings."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from campus_payroll.models.base import Base, TimestampMixin


class InstitutionSettings(Base, TimestampMixin):
    """Branding fields printed on payslips. Maintained by the settings module."""

    __tablename__ = "institution_settings"

    settings_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    institution_name: Mapped[str] = mapped_column(String, nullable=False)
    logo_path: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    board_name: Mapped[str | None] = mapped_column(String, nullable=True)
    iso_status: Mapped[str | None] = mapped_column(String, nullable=True)
    compliance_id: Mapped[str | None] = mapped_column(String, nullable=True)
