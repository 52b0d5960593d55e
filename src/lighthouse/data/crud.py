"""Table-level CRUD helpers over a ``Database``.

Column/value maps in, rows out. WHERE clauses are equality-only and
joined with ``AND``. Values always travel as bound parameters; table
and column names must be plain identifiers.

Failures are logged to ``lighthouse.data`` and reported as absence
(``None``, ``False`` or ``[]``) instead of raised, so a page can still
render when the database is unavailable::

    user_id = await insert(db, "users", {"email": email, "password": hashed})
    if user_id is None:
        errors.append("Registration failed. Please try again.")
"""

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from lighthouse.data.database import Database
from lighthouse.data.errors import DataError

logger = logging.getLogger("lighthouse.data")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        msg = f"Invalid SQL identifier: {name!r}"
        raise ValueError(msg)
    return name


def _where(where: Mapping[str, Any]) -> tuple[str, list[Any]]:
    if not where:
        return "", []
    clause = " AND ".join(f"{_ident(col)} = ?" for col in where)
    return f" WHERE {clause}", list(where.values())


async def insert(db: Database, table: str, data: Mapping[str, Any]) -> int | None:
    """Insert one row and return its id, or ``None`` on failure."""
    columns = ", ".join(_ident(col) for col in data)
    placeholders = ", ".join("?" for _ in data)
    sql = f"INSERT INTO {_ident(table)} ({columns}) VALUES ({placeholders})"
    try:
        return await db.execute_insert(sql, *data.values())
    except DataError as exc:
        logger.error("insert into %s failed: %s", table, exc)
        return None


async def update(
    db: Database, table: str, data: Mapping[str, Any], where: Mapping[str, Any]
) -> bool:
    """Update matching rows. An empty *where* is refused."""
    if not data or not where:
        logger.error("update on %s refused: empty data or where clause", table)
        return False
    assignments = ", ".join(f"{_ident(col)} = ?" for col in data)
    clause, params = _where(where)
    sql = f"UPDATE {_ident(table)} SET {assignments}{clause}"
    try:
        await db.execute(sql, *data.values(), *params)
    except DataError as exc:
        logger.error("update on %s failed: %s", table, exc)
        return False
    return True


async def delete(db: Database, table: str, where: Mapping[str, Any]) -> bool:
    """Delete matching rows. An empty *where* is refused."""
    if not where:
        logger.error("delete on %s refused: empty where clause", table)
        return False
    clause, params = _where(where)
    try:
        await db.execute(f"DELETE FROM {_ident(table)}{clause}", *params)
    except DataError as exc:
        logger.error("delete on %s failed: %s", table, exc)
        return False
    return True


async def select(
    db: Database,
    table: str,
    where: Mapping[str, Any] | None = None,
    order_by: str = "",
    limit: int = 0,
) -> list[dict[str, Any]]:
    """Select rows as dicts.

    *order_by* is inserted verbatim after ``ORDER BY``: never build it
    from user input. ``limit <= 0`` means no limit.
    """
    clause, params = _where(where or {})
    sql = f"SELECT * FROM {_ident(table)}{clause}"
    if order_by:
        sql += f" ORDER BY {order_by}"
    if limit > 0:
        sql += f" LIMIT {int(limit)}"
    try:
        return await db.fetch(sql, *params)
    except DataError as exc:
        logger.error("select from %s failed: %s", table, exc)
        return []


async def select_one(
    db: Database, table: str, where: Mapping[str, Any] | None = None
) -> dict[str, Any] | None:
    """First matching row, or ``None``."""
    rows = await select(db, table, where, limit=1)
    return rows[0] if rows else None


async def seed(db: Database, path: str | Path) -> bool:
    """Run a SQL file of seed data. Returns False (and logs) on failure."""
    try:
        sql = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("seed file %s unreadable: %s", path, exc)
        return False
    try:
        await db.execute_script(sql)
    except DataError as exc:
        logger.error("seed %s failed: %s", path, exc)
        return False
    return True
