"""Security utilities: session auth, password hashing, route protection,
and per-key request rate limiting.

Usage::

    from lighthouse.security import current_user, login, login_required

    @app.route("/dashboard")
    @login_required
    def dashboard():
        return View("dashboard.html", user_id=current_user())
"""

from lighthouse.security.auth import current_user, login, logout
from lighthouse.security.decorators import login_required
from lighthouse.security.passwords import hash_password, verify_password
from lighthouse.security.ratelimit import RateLimiter

__all__ = [
    "RateLimiter",
    "current_user",
    "hash_password",
    "login",
    "login_required",
    "logout",
    "verify_password",
]
