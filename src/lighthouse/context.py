"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: the current ``Request``.
- ``config_var``: the ``AppConfig`` of the app serving it.

Both are set by the request handler and reset after each request,
so handlers and helpers reach request state through explicit accessors
rather than module globals.
"""

from contextvars import ContextVar

from lighthouse.config import AppConfig
from lighthouse.http.request import Request

request_var: ContextVar[Request] = ContextVar("lighthouse_request")
"""The current request. Set by the request handler before dispatch."""

config_var: ContextVar[AppConfig] = ContextVar("lighthouse_config")


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_config() -> AppConfig:
    """Return the serving app's config, or a default one outside a request."""
    try:
        return config_var.get()
    except LookupError:
        return AppConfig()
