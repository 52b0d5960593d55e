"""Lighthouse: a small, predictable web stack.

Ordered-pattern routing, views wrapped in a layout (or sent bare to
htmx), signed-cookie sessions, CSRF tokens, SQLite helpers and a
file-backed rate limiter.

Basic usage::

    from lighthouse import App, View

    app = App()

    @app.route("/")
    def index():
        return View("home.html", title="Home")

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "LighthouseError",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "Template",
    "View",
    "get_request",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import lighthouse`` fast while providing a clean top-level API.
    """
    if name == "App":
        from lighthouse.app import App

        return App

    if name in ("AppConfig", "load_config"):
        from lighthouse import config as _config

        return getattr(_config, name)

    if name == "Request":
        from lighthouse.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from lighthouse.http import response as _resp

        return getattr(_resp, name)

    if name in ("View", "Template"):
        from lighthouse.templating import returns as _tmpl

        return getattr(_tmpl, name)

    if name in ("AnyResponse", "Middleware", "Next"):
        from lighthouse.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "get_request":
        from lighthouse import context as _ctx

        return getattr(_ctx, name)

    if name in ("LighthouseError", "ConfigurationError", "HTTPError", "NotFound"):
        from lighthouse import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
