from __future__ import annotations

import argparse
import json
from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Iterator

from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.logging import log_context
from app.db.session import build_engine, init_db, session_scope
from app.repositories.sql import SqlRepository
from app.seed.seed_data import seed
from timebill.timesheet import TimesheetService

from .data import load_directory, load_entries
from .exporter import export_report
from .reports import REPORT_TYPES, ReportRequest, build_report, report_columns


def parse_date(value: str | None):
    if not value:
        return None
    return datetime.fromisoformat(value).date()


@contextmanager
def open_repository(database_url: str | None) -> Iterator[SqlRepository]:
    engine = build_engine(database_url or settings.database_url)
    init_db(engine)
    try:
        with session_scope(sessionmaker(autocommit=False, autoflush=False, bind=engine)) as session:
            yield SqlRepository(session)
    finally:
        engine.dispose()


def run_report(args: argparse.Namespace) -> None:
    request = ReportRequest(
        report_type=args.report,
        start_date=parse_date(args.start_date),
        end_date=parse_date(args.end_date),
        client_id=args.client_id,
        consultant_id=args.consultant_id,
    )
    with open_repository(args.database_url) as repository:
        entries = load_entries(repository, request.entry_filter)
        rows = build_report(request, entries, load_directory(repository))

    if args.output:
        output_path = Path(args.output)
        export_report(rows, output_path, title=args.report, columns=report_columns(args.report))
        print(f"Report exported to {output_path}")
    else:
        print(json.dumps([asdict(row) for row in rows], default=str, indent=2))


def recalculate(args: argparse.Namespace) -> None:
    with open_repository(args.database_url) as repository:
        result = TimesheetService(repository).recalculate_all()
    print(f"Updated {len(result.updated)}, unchanged {len(result.unchanged)}, failed {len(result.failed)}")
    for entry_id, reason in sorted(result.failed.items()):
        print(f"  entry {entry_id}: {reason}")


def load_demo(args: argparse.Namespace) -> None:
    with open_repository(args.database_url) as repository:
        loaded = seed(repository)
    print("Demo data loaded" if loaded else "Database already has data; nothing loaded")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Timesheet reporting utility")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_cmd = subparsers.add_parser("run-report", help="Run a single report")
    run_cmd.add_argument("--report", choices=REPORT_TYPES, required=True)
    run_cmd.add_argument("--start-date")
    run_cmd.add_argument("--end-date")
    run_cmd.add_argument("--client-id", type=int)
    run_cmd.add_argument("--consultant-id", type=int)
    run_cmd.add_argument("--output", help="Output file (csv or pdf)")
    run_cmd.add_argument("--database-url")
    run_cmd.set_defaults(func=run_report)

    recalc_cmd = subparsers.add_parser("recalculate", help="Recompute stored hours and values")
    recalc_cmd.add_argument("--database-url")
    recalc_cmd.set_defaults(func=recalculate)

    seed_cmd = subparsers.add_parser("seed", help="Load demo data into an empty database")
    seed_cmd.add_argument("--database-url")
    seed_cmd.set_defaults(func=load_demo)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    with log_context(command=args.command):
        args.func(args)


if __name__ == "__main__":
    main()
