"""Forward-only SQL migration runner.

Migrations are ``.sql`` files whose names sort chronologically::

    migrations/
        2024_01_15_09_30_00_create_users.sql
        2024_02_01_14_00_00_add_login_index.sql

Files are applied in lexical filename order. The ``migrations`` ledger
table records each applied file by stem, so a file runs at most once.
Each file and its ledger row commit together. When a file fails, its
own changes roll back, earlier files stay committed, later files are
not attempted, and ``MigrationError`` is raised.

Usage::

    from lighthouse.data import Database, migrate

    db = Database("sqlite:///app.db")
    result = await migrate(db, "migrations/")
    print(result.report)
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from lighthouse.data.database import Database
from lighthouse.data.errors import DataError, MigrationError

logger = logging.getLogger("lighthouse.data.migrate")

LEDGER_TABLE = "migrations"

_CREATE_LEDGER_SQL = f"""
CREATE TABLE IF NOT EXISTS {LEDGER_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    migration VARCHAR(255) NOT NULL UNIQUE,
    executed_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

_TEMPLATE = """-- Migration: {name}
-- Created: {created}
-- Write your SQL statements below this line
"""


@dataclass(frozen=True, slots=True)
class Migration:
    """A single migration file."""

    filename: str
    name: str
    sql: str


def format_outcome(filename: str, status: str) -> str:
    """``<filename padded to 40> <status>``, one report line."""
    return f"{filename:<40} {status}"


@dataclass(frozen=True, slots=True)
class MigrationResult:
    """Per-file outcome of a migration run, in application order."""

    outcomes: list[tuple[str, str]] = field(default_factory=list)

    @property
    def applied(self) -> list[str]:
        return [name for name, status in self.outcomes if status == "applied"]

    @property
    def skipped(self) -> list[str]:
        return [name for name, status in self.outcomes if status == "skipped"]

    @property
    def report(self) -> str:
        """One ``<filename padded to 40> applied|skipped`` line per file."""
        return "\n".join(format_outcome(name, status) for name, status in self.outcomes)

    @property
    def summary(self) -> str:
        if not self.applied:
            return f"Already up to date ({len(self.skipped)} migrations applied)"
        return f"Applied {len(self.applied)} migration(s): {', '.join(self.applied)}"


def discover_migrations(directory: str | Path) -> list[Migration]:
    """Read every ``*.sql`` file in *directory*, sorted by filename."""
    path = Path(directory)
    if not path.is_dir():
        msg = f"Migration directory does not exist: {path}"
        raise MigrationError(msg)
    return [
        Migration(
            filename=sql_file.name,
            name=sql_file.stem,
            sql=sql_file.read_text(encoding="utf-8"),
        )
        for sql_file in sorted(path.glob("*.sql"), key=lambda p: p.name)
    ]


async def applied_migrations(db: Database) -> set[str]:
    """Stems already recorded in the ledger (creating it if needed)."""
    await db.execute(_CREATE_LEDGER_SQL)
    rows = await db.fetch(f"SELECT migration FROM {LEDGER_TABLE}")
    return {row["migration"] for row in rows}


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


async def _apply(db: Database, migration: Migration) -> None:
    record = f"INSERT INTO {LEDGER_TABLE} (migration) VALUES ({_sql_literal(migration.name)});"
    await db.execute_script(f"{migration.sql}\n;\n{record}", atomic=True)


async def migrate(
    db: Database,
    directory: str | Path,
    *,
    on_outcome: Callable[[str, str], None] | None = None,
) -> MigrationResult:
    """Apply pending migrations from *directory*.

    *on_outcome* is called with ``(filename, "applied" | "skipped")`` as
    each file is handled, so callers can report progress even when a
    later file fails.

    Raises:
        MigrationError: If the directory is missing or a file fails.
    """
    migrations = discover_migrations(directory)
    done = await applied_migrations(db)
    result = MigrationResult()

    def record(filename: str, status: str) -> None:
        result.outcomes.append((filename, status))
        logger.info("%-40s %s", filename, status)
        if on_outcome is not None:
            on_outcome(filename, status)

    for migration in migrations:
        if migration.name in done:
            record(migration.filename, "skipped")
            continue
        try:
            await _apply(db, migration)
        except DataError as exc:
            logger.error("Migration %s failed: %s", migration.filename, exc)
            msg = f"Migration {migration.filename} failed: {exc}"
            raise MigrationError(msg) from exc
        record(migration.filename, "applied")

    return result


def create_migration(name: str, directory: str | Path, now: datetime | None = None) -> Path:
    """Write an empty, timestamped migration file and return its path."""
    now = now or datetime.now()
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    filepath = path / f"{now:%Y_%m_%d_%H_%M_%S}_{name}.sql"
    filepath.write_text(
        _TEMPLATE.format(name=name, created=f"{now:%Y-%m-%d %H:%M:%S}"), encoding="utf-8"
    )
    return filepath
