"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campus_payroll.api.routes import (
    employees_router,
    health_router,
    payslips_router,
    periods_router,
    runs_router,
)
from campus_payroll.config import Settings, configure_logging, get_settings
from campus_payroll.database import SessionFactory, get_engine, get_session_factory
from campus_payroll.errors import (
    AccessDeniedError,
    InvalidPeriodError,
    InvalidRunDataError,
    InvalidStateError,
    NoEligibleEmployeesError,
    PayrollError,
    PeriodNotFoundError,
    RecordNotFoundError,
    TransactionFailure,
)

logger = logging.getLogger(__name__)

# Checked along the exception's MRO, so subclasses inherit their parent's status
ERROR_STATUS_CODES: dict[type[PayrollError], int] = {
    PeriodNotFoundError: status.HTTP_404_NOT_FOUND,
    RecordNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    InvalidPeriodError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NoEligibleEmployeesError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidRunDataError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AccessDeniedError: status.HTTP_403_FORBIDDEN,
    TransactionFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(exc: PayrollError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


def create_app(
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Pass ``session_factory`` to run against an existing database (tests);
    otherwise the engine is created at startup from ``settings.database_url``.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        engine = None
        if getattr(app.state, "session_factory", None) is None:
            engine = get_engine(settings.database_url, echo=settings.debug)
            app.state.session_factory = get_session_factory(engine)
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="Campus Payroll API",
        description="Payroll generation and reconciliation",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map tagged payroll errors to HTTP responses."""
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error("Payroll operation failed: %s", exc)
            content = {"detail": "Payroll operation failed", "code": exc.code}
        else:
            content = exc.to_dict()
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(periods_router, prefix="/api/v1")
    app.include_router(runs_router, prefix="/api/v1")
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(payslips_router, prefix="/api/v1")

    return app


def build_default_app() -> FastAPI:
    """Entry point for uvicorn's factory mode."""
    settings = get_settings()
    configure_logging(settings.log_level)
    return create_app(settings)
