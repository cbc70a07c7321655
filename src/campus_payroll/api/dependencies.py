"""FastAPI dependencies for dependency injection."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status

from campus_payroll.config import Settings
from campus_payroll.database import SessionFactory
from campus_payroll.errors import AccessDeniedError
from campus_payroll.services.access import Requester
from campus_payroll.services.branding import SettingsTableBranding
from campus_payroll.services.directory import SqlEmployeeDirectory
from campus_payroll.services.formal_generator import FormalGenerator
from campus_payroll.services.history_resolver import UnifiedHistoryResolver
from campus_payroll.services.payslip_builder import PayslipBuilder
from campus_payroll.services.run_snapshotter import RunSnapshotter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> SessionFactory:
    """Session factory owned by the application; each operation opens its own session."""
    return request.app.state.session_factory


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Sessions = Annotated[SessionFactory, Depends(get_session_factory)]


async def get_requester(
    x_user_id: Annotated[str | None, Header()] = None,
    x_capabilities: Annotated[str | None, Header()] = None,
) -> Requester:
    """Build the requester from headers set by the auth gateway."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header is required",
        )
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-User-ID format",
        )

    capabilities = frozenset(
        c.strip() for c in (x_capabilities or "").split(",") if c.strip()
    )
    return Requester(id=user_id, capabilities=capabilities)


CurrentRequester = Annotated[Requester, Depends(get_requester)]


def require_manager(requester: CurrentRequester, settings: AppSettings) -> Requester:
    if not requester.has(settings.manager_capability):
        raise AccessDeniedError("Payroll management capability required")
    return requester


def require_admin(requester: CurrentRequester, settings: AppSettings) -> Requester:
    if not requester.has(settings.admin_capability):
        raise AccessDeniedError("Payroll administration capability required")
    return requester


PayrollManager = Annotated[Requester, Depends(require_manager)]
PayrollAdmin = Annotated[Requester, Depends(require_admin)]


def get_generator(sessions: Sessions, settings: AppSettings) -> FormalGenerator:
    return FormalGenerator(
        sessions,
        directory=SqlEmployeeDirectory(settings.eligible_roles),
        default_tax_rate=settings.default_tax_rate,
    )


def get_snapshotter(sessions: Sessions) -> RunSnapshotter:
    return RunSnapshotter(sessions)


def get_history_resolver(sessions: Sessions) -> UnifiedHistoryResolver:
    return UnifiedHistoryResolver(sessions)


def get_payslip_builder(sessions: Sessions, settings: AppSettings) -> PayslipBuilder:
    return PayslipBuilder(
        sessions,
        branding=SettingsTableBranding(settings.institution_name),
        manager_capability=settings.manager_capability,
        verification_base_url=settings.verification_base_url,
    )
