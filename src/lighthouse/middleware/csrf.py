"""CSRF tokens: one random token per session.

The middleware only guarantees a token exists and exposes it. Form
handlers decide what a mismatch means by calling ``validate_csrf()``;
the demo forms add a generic "Invalid request" error and re-render.

Templates::

    <form method="post">
        {{ csrf_field() }}
        ...
    </form>
"""

import secrets
from contextvars import ContextVar
from dataclasses import dataclass

from kida.utils.html import Markup

from lighthouse.errors import ConfigurationError
from lighthouse.http.request import Request
from lighthouse.middleware.protocol import AnyResponse, Next
from lighthouse.middleware.sessions import get_session

_csrf_token_var: ContextVar[str | None] = ContextVar("lighthouse_csrf_token", default=None)

FIELD_NAME = "csrf_token"


@dataclass(frozen=True, slots=True)
class CSRFConfig:
    """CSRF middleware configuration.

    Attributes:
        session_key: Key used to store the token in the session.
        token_length: Random bytes per token (hex-encoded, so twice as many chars).
    """

    session_key: str = "csrf_token"
    token_length: int = 32


def csrf_token() -> str:
    """The current session's token, ``""`` when none is set."""
    token = _csrf_token_var.get()
    if token is not None:
        return token
    try:
        return str(get_session().get(CSRFConfig.session_key, ""))
    except LookupError:
        return ""


def csrf_field() -> Markup:
    """Hidden input carrying the token, for use inside forms."""
    return Markup(f'<input type="hidden" name="{FIELD_NAME}" value="{csrf_token()}">')


def validate_csrf(token: str | None) -> bool:
    """Compare *token* against the session token in constant time.

    Fails for anything but an exact match, including an empty string
    when the session holds no token.
    """
    expected = csrf_token()
    if not expected or not isinstance(token, str):
        return False
    return secrets.compare_digest(token.encode(), expected.encode())


class CSRFMiddleware:
    """Load or generate the session's CSRF token.

    Requires ``SessionMiddleware`` to be registered first.
    """

    __slots__ = ("_config",)

    def __init__(self, config: CSRFConfig | None = None) -> None:
        self._config = config or CSRFConfig()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        try:
            session = get_session()
        except LookupError:
            msg = (
                "CSRFMiddleware requires SessionMiddleware. "
                "Add SessionMiddleware before CSRFMiddleware."
            )
            raise ConfigurationError(msg) from None

        cfg = self._config
        token = session.get(cfg.session_key)
        if not token:
            token = secrets.token_hex(cfg.token_length)
            session[cfg.session_key] = token

        cv_token = _csrf_token_var.set(token)
        try:
            return await next(request)
        finally:
            _csrf_token_var.reset(cv_token)
