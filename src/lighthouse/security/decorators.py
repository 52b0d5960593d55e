"""Route protection: ``@login_required``.

Anonymous requests never reach the handler. They are redirected (302)
to the configured login URL with no detail about why.

Usage::

    @app.route("/dashboard")
    @login_required
    def dashboard():
        return View("dashboard.html")
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from lighthouse._internal.invoke import invoke
from lighthouse.errors import HTTPError

_log = logging.getLogger("lighthouse.security")


def login_required(handler: Callable) -> Callable:
    """Require an authenticated session to access this route."""

    @wraps(handler)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        from lighthouse.context import get_config, get_request
        from lighthouse.security.auth import current_user

        if current_user() is None:
            _log.info("anonymous access to %s redirected", get_request().path)
            raise HTTPError(
                status=302,
                detail="Login required",
                headers=(("Location", get_config().login_url),),
            )
        return await invoke(handler, *args, **kwargs)

    return wrapper
