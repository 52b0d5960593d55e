"""Demo site: home page, account forms and a protected dashboard.

Every form posts back to its own URL. A failed submission re-renders
the same view with the error list and the email echoed back; success
redirects. The CSRF check comes first: a mismatch reports only
"Invalid request".

Run::

    lighthouse run lighthouse.demo:create_app
"""

import logging
import secrets
from dataclasses import replace
from pathlib import Path

from lighthouse.app import App
from lighthouse.config import AppConfig, load_config
from lighthouse.data.crud import insert, select_one
from lighthouse.http.request import Request
from lighthouse.http.response import Redirect, Response
from lighthouse.middleware.csrf import CSRFMiddleware, validate_csrf
from lighthouse.middleware.sessions import SessionConfig, SessionMiddleware
from lighthouse.security.auth import current_user, login, logout
from lighthouse.security.decorators import login_required
from lighthouse.security.passwords import hash_password, verify_password
from lighthouse.security.ratelimit import RateLimiter
from lighthouse.templating.returns import View
from lighthouse.validation.rules import validate_email, validate_min_length, validate_required
from lighthouse.validation.sanitize import sanitize_email

logger = logging.getLogger("lighthouse.demo")

TEMPLATES_DIR = Path(__file__).parent / "templates"
MIGRATIONS_DIR = Path(__file__).parent / "migrations"
DEFAULT_DATABASE = "sqlite:///storage/database.sqlite"

INVALID_REQUEST = "Invalid request"
MIN_PASSWORD_LENGTH = 8


def _prepare(config: AppConfig) -> AppConfig:
    secret_key = config.secret_key
    if not secret_key:
        logger.warning("SECRET_KEY is not set; sessions will not survive a restart")
        secret_key = secrets.token_hex(32)
    return replace(
        config,
        template_dir=TEMPLATES_DIR,
        migrations_dir=config.migrations_dir or MIGRATIONS_DIR,
        database=config.database or DEFAULT_DATABASE,
        secret_key=secret_key,
    )


def _password_errors(password: str, confirm: str) -> list[str]:
    errors: list[str] = []
    if not validate_min_length(password, MIN_PASSWORD_LENGTH):
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if password != confirm:
        errors.append("Passwords do not match")
    return errors


def create_app(config: AppConfig | None = None) -> App:
    """Build the demo app.

    Without *config*, settings come from the environment and ``./.env``.
    """
    config = _prepare(config or load_config("."))
    app = App(config)
    limiter = RateLimiter(config.rate_limit_file)

    app.add_middleware(
        SessionMiddleware(SessionConfig(config.secret_key, cookie_name=config.session_cookie))
    )
    app.add_middleware(CSRFMiddleware())

    @app.route("/")
    def home():
        return View(
            "home.html",
            title="Home",
            description="A minimal, predictable web micro-stack.",
        )

    @app.route("/htmx")
    def htmx():
        return Response("<p>Hello from HTMX</p>")

    @app.route("/register")
    async def register(request: Request):
        if request.method != "POST":
            return View("register.html", title="Create Account", errors=[], email="")

        form = await request.form()
        errors: list[str] = []
        if not validate_csrf(form.get("csrf_token")):
            errors.append(INVALID_REQUEST)
        else:
            email = sanitize_email(form.get("email", ""))
            password = form.get("password", "")
            if not validate_email(email):
                errors.append("Invalid email address")
            errors.extend(_password_errors(password, form.get("confirm_password", "")))

            if not errors:
                if await select_one(app.db, "users", {"email": email}) is not None:
                    errors.append("Email already registered")
                else:
                    user_id = await insert(
                        app.db, "users", {"email": email, "password": hash_password(password)}
                    )
                    if user_id is None:
                        errors.append("Registration failed. Please try again.")
                    else:
                        login(user_id)
                        return Redirect("/dashboard")

        return View(
            "register.html", title="Create Account", errors=errors, email=form.text("email")
        )

    @app.route("/login")
    async def login_page(request: Request):
        if request.method != "POST":
            return View("login.html", title="Sign In", errors=[], email="")

        form = await request.form()
        errors: list[str] = []
        if not validate_csrf(form.get("csrf_token")):
            errors.append(INVALID_REQUEST)
        else:
            email = sanitize_email(form.get("email", ""))
            password = form.get("password", "")
            if not validate_email(email):
                errors.append("Invalid email address")
            if not validate_required(password):
                errors.append("Password is required")

            if not errors and not await limiter.check_async(f"{request.client_ip}:login"):
                errors.append("Too many login attempts. Please try again later.")

            if not errors:
                user = await select_one(app.db, "users", {"email": email})
                if user is not None and verify_password(password, user["password"]):
                    login(user["id"])
                    return Redirect("/dashboard")
                errors.append("Invalid email or password")

        return View("login.html", title="Sign In", errors=errors, email=form.text("email"))

    @app.route("/forgot-password")
    async def forgot_password(request: Request):
        if request.method != "POST":
            return View("forgot_password.html", title="Reset Password", errors=[], email="")

        form = await request.form()
        errors: list[str] = []
        success = ""
        if not validate_csrf(form.get("csrf_token")):
            errors.append(INVALID_REQUEST)
        else:
            email = sanitize_email(form.get("email", ""))
            if not validate_email(email):
                errors.append("Invalid email address")
            elif await select_one(app.db, "users", {"email": email}) is None:
                errors.append("No account found with this email address")
            else:
                # TODO: persist a reset token and mail the link once a mail backend exists
                success = "Password reset instructions have been sent to your email address."

        return View(
            "forgot_password.html",
            title="Reset Password",
            errors=errors,
            success=success,
            email=form.text("email"),
        )

    @app.route("/reset-password")
    async def reset_password(request: Request):
        if request.method != "POST":
            return View(
                "reset_password.html",
                title="Set New Password",
                errors=[],
                token=request.query.get("token", ""),
            )

        form = await request.form()
        errors: list[str] = []
        success = False
        token = form.text("token")
        if not validate_csrf(form.get("csrf_token")):
            errors.append(INVALID_REQUEST)
        else:
            if not token:
                errors.append("Invalid reset token")
            errors.extend(
                _password_errors(form.get("password", ""), form.get("confirm_password", ""))
            )
            success = not errors

        return View(
            "reset_password.html",
            title="Set New Password",
            errors=errors,
            success=success,
            token=token,
        )

    @app.route("/dashboard")
    @login_required
    async def dashboard():
        user = await select_one(app.db, "users", {"id": current_user()})
        return View(
            "dashboard.html",
            layout="_dashboard.html",
            title="Dashboard",
            email=user["email"] if user else "User",
        )

    @app.route("/logout")
    def sign_out():
        logout()
        return Redirect("/login")

    return app
