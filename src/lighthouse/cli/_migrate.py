"""``lighthouse migrate`` and ``lighthouse make-migration``."""

import argparse
import os
import sys

import anyio

from lighthouse.cli import DEFAULT_DATABASE
from lighthouse.data.database import Database
from lighthouse.data.errors import DataError
from lighthouse.data.migrate import MigrationResult, create_migration, format_outcome, migrate


def _print_outcome(filename: str, status: str) -> None:
    print(format_outcome(filename, status), flush=True)


async def _migrate(url: str, directory: str) -> MigrationResult:
    async with Database(url) as db:
        return await migrate(db, directory, on_outcome=_print_outcome)


def run_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations, printing one line per file as it goes."""
    url = args.database or os.environ.get("DATABASE_URL") or DEFAULT_DATABASE
    try:
        result = anyio.run(_migrate, url, args.dir)
    except DataError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(result.summary)


def run_make_migration(args: argparse.Namespace) -> None:
    """Create an empty timestamped migration file and print its path."""
    path = create_migration(args.name, args.dir)
    print(f"Created migration: {path}")
