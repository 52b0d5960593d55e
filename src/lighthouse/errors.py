"""Lighthouse exception hierarchy.

Shared across Router, App, handlers, middleware and the data layer so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class LighthouseError(Exception):
    """Base for all lighthouse-specific errors."""


class ConfigurationError(LighthouseError):
    """Raised when configuration is missing or invalid.

    A missing required environment key is fatal at startup unless the
    config was loaded with ``testing=True``.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(LighthouseError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, decorators, or handlers. The request handler
    catches these and turns them into a response. ``headers`` is how
    ``login_required`` carries its ``Location``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
