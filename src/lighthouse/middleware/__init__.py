"""Built-in middleware: signed-cookie sessions and CSRF tokens."""

from lighthouse.middleware.csrf import (
    CSRFConfig,
    CSRFMiddleware,
    csrf_field,
    csrf_token,
    validate_csrf,
)
from lighthouse.middleware.protocol import AnyResponse, Middleware, Next
from lighthouse.middleware.sessions import (
    SessionConfig,
    SessionMiddleware,
    destroy_session,
    get_session,
)

__all__ = [
    "AnyResponse",
    "CSRFConfig",
    "CSRFMiddleware",
    "Middleware",
    "Next",
    "SessionConfig",
    "SessionMiddleware",
    "csrf_field",
    "csrf_token",
    "destroy_session",
    "get_session",
    "validate_csrf",
]
