"""Database engine, session factory and unit-of-work management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from campus_payroll.errors import TransactionFailure
from campus_payroll.models import Base

logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]

DEFERRED_OPTION = "sqlite_deferred"


def get_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create async database engine."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=echo)
        _use_immediate_transactions(engine)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def get_session_factory(engine: AsyncEngine) -> SessionFactory:
    """Create the session factory every unit of work draws from."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """Make SQLite take its write lock when a transaction begins.

    SQLite has no row locks, so ``SELECT ... FOR UPDATE`` is a no-op there.
    ``BEGIN IMMEDIATE`` serializes writers instead: a second generator blocks
    until the first commits and then reads the updated period status.

    Connections marked with the ``sqlite_deferred`` execution option (see
    ``read_session``) start a plain deferred ``BEGIN`` and do not queue
    behind a running writer.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        if conn.get_execution_options().get(DEFERRED_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables (development, tests and the CLI ``init-db``)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def unit_of_work(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """One session, one transaction.

    Commits when the block exits normally and rolls back on any exception.
    Storage errors are re-raised as TransactionFailure; domain errors
    propagate unchanged.
    """
    async with factory() as session:
        try:
            async with session.begin():
                yield session
        except SQLAlchemyError as exc:
            logger.exception("Transaction rolled back after storage error")
            raise TransactionFailure(f"Storage failure: {exc.__class__.__name__}") from exc


@asynccontextmanager
async def read_session(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Session for pure reads; nothing is ever committed.

    On SQLite the read transaction is deferred, so it never waits for the
    write lock a generation or run save is holding.
    """
    async with factory() as session:
        await session.connection(execution_options={DEFERRED_OPTION: True})
        yield session


async def ping(session: AsyncSession) -> bool:
    """Check database connectivity."""
    await session.execute(text("SELECT 1"))
    return True
