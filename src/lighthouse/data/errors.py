"""Data layer error hierarchy."""

from lighthouse.errors import LighthouseError


class DataError(LighthouseError):
    """Base for all lighthouse.data errors."""


class ConnectionError(DataError):  # noqa: A001
    """Raised when the database file cannot be opened."""


class QueryError(DataError):
    """Raised when a SQL statement fails."""


class MigrationError(DataError):
    """Raised when a migration file fails to apply.

    Migrations applied before the failing one stay committed.
    """
