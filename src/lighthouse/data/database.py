"""Async access to a single SQLite database.

SQL in, plain ``dict`` rows out. Connection URL format::

    sqlite:///path/to/app.db    # SQLite file
    sqlite:///:memory:          # In-memory SQLite

One ``sqlite3`` connection serves the whole app. Each operation runs as a
single worker-thread call via ``anyio.to_thread``, and calls are
serialized through an ``anyio.Lock`` so two tasks never drive the
connection at once.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import anyio
from anyio import to_thread

from lighthouse.data.errors import ConnectionError, DataError, QueryError

logger = logging.getLogger("lighthouse.data")

# Set inside transaction(); query methods reuse the held connection.
_current_conn: ContextVar[sqlite3.Connection] = ContextVar("lighthouse_db_conn")


def _in_transaction() -> bool:
    try:
        _current_conn.get()
        return True
    except LookupError:
        return False


def parse_sqlite_path(url: str) -> str:
    """Extract the file path from a ``sqlite://`` URL."""
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix) :]
    msg = f"Unsupported database URL: {url!r}. Expected sqlite:///path"
    raise DataError(msg)


# -- Worker-thread operations --
#
# The connection is opened with check_same_thread=False because
# successive calls may land on different pool threads, and with
# autocommit=True so single statements commit immediately.


def _open(path: str) -> sqlite3.Connection:
    if path not in ("", ":memory:"):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, autocommit=True, check_same_thread=False)
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def _rows(cursor: sqlite3.Cursor, rows: Sequence[Sequence[Any]]) -> list[dict[str, Any]]:
    columns = [desc[0] for desc in cursor.description]
    return [dict(zip(columns, row, strict=True)) for row in rows]


def _fetch_all(conn: sqlite3.Connection, sql: str, params: Sequence[Any]) -> list[dict[str, Any]]:
    cursor = conn.execute(sql, params)
    return _rows(cursor, cursor.fetchall())


def _fetch_first(
    conn: sqlite3.Connection, sql: str, params: Sequence[Any]
) -> dict[str, Any] | None:
    cursor = conn.execute(sql, params)
    row = cursor.fetchone()
    return None if row is None else _rows(cursor, [row])[0]


def _rowcount(conn: sqlite3.Connection, sql: str, params: Sequence[Any]) -> int:
    return conn.execute(sql, params).rowcount


def _lastrowid(conn: sqlite3.Connection, sql: str, params: Sequence[Any]) -> int | None:
    return conn.execute(sql, params).lastrowid


def _script(conn: sqlite3.Connection, sql: str, params: Sequence[Any]) -> None:
    # executescript commits any pending transaction first
    try:
        conn.executescript(sql)
    except sqlite3.Error:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise


def _begin(conn: sqlite3.Connection) -> None:
    conn.autocommit = False


def _end(conn: sqlite3.Connection, *, commit: bool) -> None:
    try:
        if commit:
            conn.commit()
        else:
            conn.rollback()
    finally:
        conn.autocommit = True


class Database:
    """Async SQLite database.

    Usage::

        db = Database("sqlite:///app.db")

        await db.execute("UPDATE users SET email = ? WHERE id = ?", email, 42)
        user_id = await db.execute_insert("INSERT INTO users (email) VALUES (?)", email)
        rows = await db.fetch("SELECT * FROM users ORDER BY id")
        row = await db.fetch_one("SELECT * FROM users WHERE id = ?", user_id)
        count = await db.fetch_val("SELECT COUNT(*) FROM users")

        async with db.transaction():
            await db.execute("INSERT INTO users ...", ...)
            await db.execute("INSERT INTO profiles ...", ...)
    """

    __slots__ = ("_conn", "_echo", "_open_lock", "_path", "_query_lock", "url")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self.url = url
        self._path = parse_sqlite_path(url)
        self._echo = echo
        # Created on first use so they bind to the running event loop
        self._open_lock: anyio.Lock | None = None
        self._query_lock: anyio.Lock | None = None
        self._conn: sqlite3.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    # -- Connection management --

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[sqlite3.Connection]:
        held = _current_conn.get(None)
        if held is not None:
            yield held
            return
        if self._conn is None:
            await self.connect()
        if self._query_lock is None:
            self._query_lock = anyio.Lock()
        async with self._query_lock:
            if self._conn is None:
                raise ConnectionError("DB connection closed")
            yield self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Execute several statements atomically.

        Commits on clean exit, rolls back on exception. A nested
        ``transaction()`` joins the outer one.
        """
        if _in_transaction():
            yield
            return
        async with self._connection() as conn:
            token = _current_conn.set(conn)
            try:
                await to_thread.run_sync(_begin, conn)
                try:
                    yield
                except BaseException:
                    with anyio.CancelScope(shield=True):
                        await to_thread.run_sync(lambda: _end(conn, commit=False))
                    raise
                await to_thread.run_sync(lambda: _end(conn, commit=True))
            finally:
                _current_conn.reset(token)

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        if self._echo:
            logger.debug("%6.1fms  %s  params=%r", elapsed * 1000, sql, tuple(params))

    async def _run(
        self,
        op: Callable[[sqlite3.Connection, str, Sequence[Any]], Any],
        sql: str,
        params: Sequence[Any],
    ) -> Any:
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                return await to_thread.run_sync(op, conn, sql, params)
            except sqlite3.Error as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    # -- Public query API --

    async def fetch(self, sql: str, /, *params: Any) -> list[dict[str, Any]]:
        """Return every row as a dict."""
        return await self._run(_fetch_all, sql, params)

    async def fetch_one(self, sql: str, /, *params: Any) -> dict[str, Any] | None:
        """Return the first row as a dict, or ``None``."""
        return await self._run(_fetch_first, sql, params)

    async def fetch_val(self, sql: str, /, *params: Any) -> Any:
        """Return the first column of the first row (``COUNT(*)`` and friends)."""
        row = await self.fetch_one(sql, *params)
        if row is None:
            return None
        return next(iter(row.values()))

    async def execute(self, sql: str, /, *params: Any) -> int:
        """Run a statement and return the number of rows affected."""
        return await self._run(_rowcount, sql, params)

    async def execute_insert(self, sql: str, /, *params: Any) -> int | None:
        """Run an INSERT and return the new row's id."""
        return await self._run(_lastrowid, sql, params)

    async def execute_script(self, sql: str, /, *, atomic: bool = False) -> None:
        """Run several statements at once (migrations, seed files).

        With ``atomic=True`` the script is wrapped in ``BEGIN``/``COMMIT``
        and rolled back entirely if any statement fails. The script must
        not manage its own transaction in that case.
        """
        script = f"BEGIN;\n{sql}\n;COMMIT;" if atomic else sql
        await self._run(_script, script, ())

    # -- Lifecycle --

    async def connect(self) -> None:
        """Open the connection. Called automatically on first query.

        Raises ``ConnectionError`` if the file or its directory cannot be
        opened.
        """
        if self._conn is not None:
            return
        if self._open_lock is None:
            self._open_lock = anyio.Lock()
        async with self._open_lock:
            if self._conn is not None:
                return
            try:
                self._conn = await to_thread.run_sync(_open, self._path)
            except (OSError, sqlite3.Error) as exc:
                msg = f"DB connection failed: {exc}"
                raise ConnectionError(msg) from exc

    async def disconnect(self) -> None:
        """Close the connection."""
        if self._conn is None:
            return
        if self._open_lock is None:
            self._open_lock = anyio.Lock()
        async with self._open_lock:
            conn, self._conn = self._conn, None
            if conn is not None:
                await to_thread.run_sync(conn.close)

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.disconnect()
