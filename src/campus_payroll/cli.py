"""Campus payroll operator CLI.

Usage:
    python -m campus_payroll.cli init-db
    python -m campus_payroll.cli open-period --start 2024-01-01 --end 2024-01-31
    python -m campus_payroll.cli generate --period-id X --actor-id Y
    python -m campus_payroll.cli history --employee-id X
    python -m campus_payroll.cli runs
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from datetime import date
from typing import Any
from uuid import UUID

from campus_payroll.config import Settings, configure_logging, get_settings
from campus_payroll.database import (
    SessionFactory,
    create_schema,
    get_engine,
    get_session_factory,
    unit_of_work,
)
from campus_payroll.errors import PayrollError
from campus_payroll.services.directory import SqlEmployeeDirectory
from campus_payroll.services.formal_generator import FormalGenerator
from campus_payroll.services.history_resolver import UnifiedHistoryResolver
from campus_payroll.services.period_registry import PayPeriodRegistry
from campus_payroll.services.run_snapshotter import RunSnapshotter

logger = logging.getLogger(__name__)

Command = Callable[[argparse.Namespace, SessionFactory], Awaitable[Any]]


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


class PayrollCli:
    """Operator commands over the payroll services."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m campus_payroll.cli",
            description="Campus payroll operational tools",
        )
        parser.add_argument(
            "--database-url",
            type=str,
            default=None,
            help="Database URL (default: $DATABASE_URL)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create all tables")

        open_period = subparsers.add_parser("open-period", help="Open a new pay period")
        open_period.add_argument("--start", type=parse_date, required=True)
        open_period.add_argument("--end", type=parse_date, required=True)

        generate = subparsers.add_parser(
            "generate",
            help="Generate formal payroll for an Open period",
        )
        generate.add_argument("--period-id", type=parse_uuid, required=True)
        generate.add_argument(
            "--actor-id",
            type=parse_uuid,
            required=True,
            help="Administrator recorded as generated_by",
        )

        history = subparsers.add_parser("history", help="Unified payment history")
        history.add_argument("--employee-id", type=parse_uuid, required=True)

        subparsers.add_parser("runs", help="List saved ad-hoc runs")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Command] = {
            "init-db": self._cmd_init_db,
            "open-period": self._cmd_open_period,
            "generate": self._cmd_generate,
            "history": self._cmd_history,
            "runs": self._cmd_runs,
        }

        try:
            result = asyncio.run(self._execute(handlers[parsed.command], parsed))
        except PayrollError as exc:
            print(json.dumps(exc.to_dict()), file=sys.stderr)
            return 1

        print(json.dumps(result, indent=2, default=str))
        return 0

    async def _execute(self, handler: Command, args: argparse.Namespace) -> Any:
        engine = get_engine(args.database_url or self.settings.database_url)
        try:
            if args.command == "init-db":
                await create_schema(engine)
            return await handler(args, get_session_factory(engine))
        finally:
            await engine.dispose()

    async def _cmd_init_db(self, args: argparse.Namespace, sessions: SessionFactory) -> Any:
        logger.info("Database schema created")
        return {"status": "ok"}

    async def _cmd_open_period(self, args: argparse.Namespace, sessions: SessionFactory) -> Any:
        async with unit_of_work(sessions) as session:
            period = await PayPeriodRegistry(session).open_period(args.start, args.end)
        return period.to_dict()

    async def _cmd_generate(self, args: argparse.Namespace, sessions: SessionFactory) -> Any:
        generator = FormalGenerator(
            sessions,
            directory=SqlEmployeeDirectory(self.settings.eligible_roles),
            default_tax_rate=self.settings.default_tax_rate,
        )
        records = await generator.generate(args.period_id, args.actor_id)
        return {
            "period_id": args.period_id,
            "records_created": len(records),
            "records": [r.to_dict() for r in records],
        }

    async def _cmd_history(self, args: argparse.Namespace, sessions: SessionFactory) -> Any:
        entries = await UnifiedHistoryResolver(sessions).history_for(args.employee_id)
        return [{**asdict(e), "source": e.source.value} for e in entries]

    async def _cmd_runs(self, args: argparse.Namespace, sessions: SessionFactory) -> Any:
        runs = await RunSnapshotter(sessions).list_runs()
        return [r.to_dict() for r in runs]


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    configure_logging(cli.settings.log_level)
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
