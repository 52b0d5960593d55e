"""Async SQLite access, CRUD helpers and migrations.

Usage::

    from lighthouse.data import Database, insert, migrate, select_one

    db = Database("sqlite:///app.db")
    await migrate(db, "migrations/")
    user_id = await insert(db, "users", {"email": "a@example.com", "password": hashed})
    user = await select_one(db, "users", {"id": user_id})
"""

from lighthouse.data.crud import delete, insert, seed, select, select_one, update
from lighthouse.data.database import Database
from lighthouse.data.errors import ConnectionError, DataError, MigrationError, QueryError
from lighthouse.data.migrate import MigrationResult, create_migration, migrate

__all__ = [
    "ConnectionError",
    "DataError",
    "Database",
    "MigrationError",
    "MigrationResult",
    "QueryError",
    "create_migration",
    "delete",
    "insert",
    "migrate",
    "seed",
    "select",
    "select_one",
    "update",
]
