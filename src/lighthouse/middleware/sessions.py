"""Session middleware: signed cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``.
The session dict lives in a ContextVar for the duration of the request
and is reachable through ``get_session()`` from handlers, helpers and
template globals.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

from lighthouse.errors import ConfigurationError
from lighthouse.http.request import Request
from lighthouse.middleware.protocol import AnyResponse, Next

_session_var: ContextVar[dict[str, Any] | None] = ContextVar("lighthouse_session", default=None)


def get_session() -> dict[str, Any]:
    """Return the current session dict.

    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is added "
            "to the app before accessing the session."
        )
        raise LookupError(msg)
    return session


def destroy_session() -> None:
    """Drop every key in the current session.

    The middleware re-signs the now empty dict onto the response, so the
    browser's previous session (user id and CSRF token included) is gone
    from the next request on.
    """
    get_session().clear()


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required: sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "lighthouse_session"
    max_age: int = 86400
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


class SessionMiddleware:
    """Signed cookie session middleware.

    Usage::

        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))

        @app.route("/visits")
        def visits():
            session = get_session()
            session["visits"] = session.get("visits", 0) + 1
            return f"Visits: {session['visits']}"
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="lighthouse.session")

    def _load_session(self, request: Request) -> dict[str, Any]:
        raw = request.cookies.get(self._config.cookie_name)
        if not raw:
            return {}
        try:
            data = self._serializer.loads(raw, max_age=self._config.max_age)
        except BadSignature:
            return {}
        return data if isinstance(data, dict) else {}

    def _save_session(self, response: AnyResponse, session: dict[str, Any]) -> AnyResponse:
        cfg = self._config
        return response.with_cookie(
            cfg.cookie_name,
            self._serializer.dumps(session),
            max_age=cfg.max_age,
            path=cfg.path,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Load session, dispatch, then save the session to the response."""
        session = self._load_session(request)
        token = _session_var.set(session)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)
        # Always re-sign so the timestamp slides with activity
        return self._save_session(response, session)
