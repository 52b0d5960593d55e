"""Session-scoped authentication state.

The only thing stored is the user's integer id under ``user_id``.
Requires ``SessionMiddleware``; ``current_user()`` is also safe to call
outside a request (it reports no user).
"""

import logging

from lighthouse.middleware.sessions import destroy_session, get_session

_log = logging.getLogger("lighthouse.security")

SESSION_KEY = "user_id"


def login(user_id: int) -> None:
    """Mark *user_id* as the authenticated user for this session."""
    get_session()[SESSION_KEY] = int(user_id)
    _log.debug("login user_id=%s", user_id)


def logout() -> None:
    """Destroy the whole session, CSRF token included."""
    destroy_session()


def current_user() -> int | None:
    """The logged-in user's id, or None."""
    try:
        value = get_session().get(SESSION_KEY)
    except LookupError:
        return None
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
