"""Lighthouse application class.

Mutable during setup (route registration, middleware, template globals).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kida import Environment

from lighthouse._internal.asgi import Receive, Scope, Send
from lighthouse._internal.types import ErrorHandler, Handler
from lighthouse.config import AppConfig
from lighthouse.data.database import Database
from lighthouse.data.migrate import migrate
from lighthouse.middleware.protocol import Middleware
from lighthouse.routing.route import Route
from lighthouse.routing.router import Router
from lighthouse.server.handler import handle_request
from lighthouse.server.logs import configure_file_logging
from lighthouse.templating.integration import create_environment


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    pattern: str
    handler: Handler
    name: str | None


class App:
    """The lighthouse application.

    Mutable during setup (routes, middleware, error handlers, globals).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    Routes match in registration order; the first pattern that matches
    the path wins, whatever the method::

        app = App(AppConfig(template_dir="templates", secret_key="..."))

        @app.route("/user/{id}")
        async def user(id: str):
            return View("user.html", id=id)

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app, even when several workers take their
        first request at once.
    """

    __slots__ = (
        "_db",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_middleware",
        "_middleware_list",
        "_migrations_dir",
        "_pending_routes",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
        migrations: str | Path | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Database: an instance, a URL, or config.database.
        # When set, lifespan connects it and runs migrations.
        url = db if db is not None else self.config.database
        self._db: Database | None = Database(url) if isinstance(url, str) else url
        self._migrations_dir: str | Path | None = (
            migrations if migrations is not None else self.config.migrations_dir
        )

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._kida_env: Environment | None = None

    @property
    def db(self) -> Database:
        """The app's database. Raises ``RuntimeError`` when none is configured."""
        if self._db is None:
            msg = "No database configured. Pass db= or set AppConfig.database."
            raise RuntimeError(msg)
        return self._db

    @property
    def routes(self) -> list[Route]:
        """Registered routes in match order."""
        if self._router is not None:
            return self._router.routes
        return [Route(p.pattern, p.handler, p.name) for p in self._pending_routes]

    # -- Route registration --

    def route(self, pattern: str, *, name: str | None = None) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            pattern: URL path pattern. Use ``{param}`` for one path segment;
                captures reach the handler as positional strings.
            name: Optional route name.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(pattern, func, name))
            return func

        return decorator

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline. The first added runs outermost."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the database is connected and migrated.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        reload: bool | None = None,
        app_path: str | None = None,
    ) -> None:
        """Compile the app and serve it with the pounce dev server.

        Args:
            host: Override bind host.
            port: Override bind port.
            reload: Restart on file changes. Defaults to ``config.debug``.
            app_path: ``"module:attribute"`` import string for reloads.
        """
        self._ensure_frozen()

        from lighthouse.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug if reload is None else reload,
            app_path=app_path,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            kida_env=self._kida_env,
            config=self.config,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, connects and migrates the database
        when one is configured, then runs the registered hooks.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Connect the database, apply pending migrations, run startup hooks."""
        self._ensure_frozen()
        if self._db is not None:
            await self._db.connect()
            if self._migrations_dir is not None:
                await migrate(self._db, self._migrations_dir)

        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        """Run shutdown hooks, then disconnect the database."""
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

        if self._db is not None:
            await self._db.disconnect()

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Compile route table
        router = Router()
        for pending in self._pending_routes:
            router.add(Route(pending.pattern, pending.handler, pending.name))
        router.compile()
        self._router = router

        # 2. Capture middleware as immutable tuple
        self._middleware = tuple(self._middleware_list)

        # 3. Error log file
        if self.config.log_file:
            configure_file_logging(self.config.log_file)

        # 4. Initialize kida environment
        self._kida_env = create_environment(
            self.config,
            self._template_filters,
            self._template_globals,
        )

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
