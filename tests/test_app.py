"""Tests for the App pipeline: dispatch, negotiation, layouts, errors, lifespan."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import pytest

from lighthouse import App, AppConfig, Redirect, Request, Response, Template, View
from lighthouse.errors import HTTPError
from lighthouse.testing import TestClient, assert_is_fragment, assert_is_page, assert_redirects_to

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _app(**config_overrides: Any) -> App:
    return App(AppConfig(template_dir=TEMPLATES_DIR, **config_overrides))


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    async def test_captures_are_positional(self) -> None:
        app = _app()

        @app.route("/add/{a}/{b}")
        def add(a, b):
            return Response(f"{a}+{b}")

        async with TestClient(app) as client:
            response = await client.get("/add/2/40")
        assert response.text == "2+40"

    async def test_request_parameter_does_not_consume_capture(self) -> None:
        app = _app()

        @app.route("/users/{id}")
        def user(request: Request, user_id):
            return Response(f"{request.method} {user_id}")

        async with TestClient(app) as client:
            response = await client.get("/users/42")
        assert response.text == "GET 42"

    async def test_routes_are_method_agnostic(self) -> None:
        app = _app()

        @app.route("/form")
        def form(request):
            return Response(request.method)

        async with TestClient(app) as client:
            assert (await client.get("/form")).text == "GET"
            assert (await client.post("/form", form={})).text == "POST"
            assert (await client.request("DELETE", "/form")).text == "DELETE"

    async def test_query_string_ignored_for_matching(self) -> None:
        app = _app()

        @app.route("/search")
        def search(request):
            return Response(request.query.get("q", ""))

        async with TestClient(app) as client:
            response = await client.get("/search?q=lamp")
        assert response.status == 200
        assert response.text == "lamp"

    async def test_first_registered_wins(self) -> None:
        app = _app()

        @app.route("/items/{id}")
        def item(item_id):
            return Response(f"item {item_id}")

        @app.route("/items/new")
        def new_item():
            return Response("new")

        async with TestClient(app) as client:
            response = await client.get("/items/new")
        assert response.text == "item new"

    async def test_async_handler(self) -> None:
        app = _app()

        @app.route("/")
        async def index():
            await asyncio.sleep(0)
            return Response("async")

        async with TestClient(app) as client:
            assert (await client.get("/")).text == "async"


# ---------------------------------------------------------------------------
# Return values and layout
# ---------------------------------------------------------------------------


class TestNegotiation:
    async def test_str_is_wrapped_in_layout(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return "<p>Plain</p>"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert_is_page(response)
        assert "<p>Plain</p>" in response.text
        assert "<title>Welcome to Lighthouse</title>" in response.text

    async def test_fragment_request_gets_bare_content(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return "<p>Plain</p>"

        async with TestClient(app) as client:
            response = await client.fragment("/")
        assert_is_fragment(response)
        assert response.text == "<p>Plain</p>"

    async def test_response_is_never_wrapped(self) -> None:
        app = _app()

        @app.route("/raw")
        def raw():
            return Response("<p>raw</p>")

        async with TestClient(app) as client:
            response = await client.get("/raw")
        assert response.text == "<p>raw</p>"

    async def test_view_overrides_metadata(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return View("hello.html", title="Custom", description="About", name="World")

        async with TestClient(app) as client:
            response = await client.get("/")
        assert_is_page(response)
        assert "<p>Hello World</p>" in response.text
        assert "<title>Custom</title>" in response.text
        assert 'content="About"' in response.text
        assert 'content="Max"' in response.text

    async def test_view_context_is_escaped(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return View("hello.html", name="<script>")

        async with TestClient(app) as client:
            response = await client.fragment("/")
        assert "&lt;script&gt;" in response.text
        assert "<script>" not in response.text

    async def test_view_with_own_layout(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return View("hello.html", layout="_alt_layout.html", title="T", name="Alt")

        async with TestClient(app) as client:
            response = await client.get("/")
        assert "<title>ALT T</title>" in response.text
        assert '<body class="alt"><p>Hello Alt</p>' in response.text

    async def test_missing_layout_is_critical_failure(self, caplog) -> None:
        app = _app()

        @app.route("/")
        def index():
            return View("hello.html", layout="_missing.html", name="x")

        with caplog.at_level(logging.ERROR, logger="lighthouse.server"):
            async with TestClient(app) as client:
                response = await client.get("/")
        assert response.status == 500
        assert response.text == "Critical failure."
        assert caplog.records

    async def test_template_is_full_page(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return Template("page.html", title="Standalone")

        async with TestClient(app) as client:
            response = await client.get("/")
        assert "<h1>Standalone</h1>" in response.text
        assert "Welcome to Lighthouse" not in response.text

    async def test_redirect(self) -> None:
        app = _app()

        @app.route("/old")
        def old():
            return Redirect("/new")

        async with TestClient(app) as client:
            response = await client.get("/old")
        assert_redirects_to(response, "/new")
        assert response.text == ""

    async def test_dict_is_json(self) -> None:
        app = _app()

        @app.route("/api")
        def api():
            return {"ok": True}

        async with TestClient(app) as client:
            response = await client.get("/api")
        assert response.content_type == "application/json; charset=utf-8"
        assert response.text == '{"ok": true}'

    async def test_status_tuple(self) -> None:
        app = _app()

        @app.route("/create")
        def create():
            return Response("made"), 201

        async with TestClient(app) as client:
            assert (await client.get("/create")).status == 201

    async def test_unsupported_return_is_500(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return object()

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500

    async def test_template_filters_and_globals(self) -> None:
        app = _app()

        @app.template_filter("shout")
        def shout(value: str) -> str:
            return value.upper()

        @app.template_global("site_name")
        def site_name() -> str:
            return "Beacon"

        @app.route("/")
        def index():
            return View("filters.html", word="hey")

        async with TestClient(app) as client:
            response = await client.fragment("/")
        assert "<p>HEY Beacon</p>" in response.text

    async def test_config_lookup_by_env_key(self) -> None:
        app = _app(app_name="Beacon", env={"APP_NAME": "Beacon"})

        @app.route("/")
        def index():
            return View("config.html")

        async with TestClient(app) as client:
            response = await client.fragment("/")
        assert "<p>Beacon / Beacon</p>" in response.text


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    async def test_unknown_path_renders_not_found_view(self) -> None:
        app = _app()

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert "404 - Page Not Found" in response.text
        assert_is_page(response, status=404)

    async def test_not_found_fragment(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.fragment("/nowhere")
        assert_is_fragment(response, status=404)

    async def test_app_template_replaces_builtin_404(self, tmp_path) -> None:
        (tmp_path / "404.html").write_text("<p>Nothing here</p>")
        app = App(AppConfig(template_dir=tmp_path))

        async with TestClient(app) as client:
            response = await client.fragment("/nowhere")
        assert response.status == 404
        assert response.text.strip() == "<p>Nothing here</p>"

    async def test_unexpected_error_is_generic_500(self, caplog) -> None:
        app = _app()

        @app.route("/boom")
        def boom():
            raise ValueError("secret detail")

        with caplog.at_level(logging.ERROR, logger="lighthouse.server"):
            async with TestClient(app) as client:
                response = await client.get("/boom")

        assert response.status == 500
        assert "An unexpected error occurred." in response.text
        assert "secret detail" not in response.text
        assert "secret detail" in caplog.text
        assert "test_app.py" in caplog.text

    async def test_debug_shows_traceback(self) -> None:
        app = _app(debug=True)

        @app.route("/boom")
        def boom():
            raise ValueError("boom <b>")

        async with TestClient(app) as client:
            response = await client.fragment("/boom")
        assert response.status == 500
        assert "Traceback" in response.text
        assert "boom &lt;b&gt;" in response.text

    async def test_http_error_detail(self) -> None:
        app = _app()

        @app.route("/secret")
        def secret():
            raise HTTPError(status=403, detail="Forbidden")

        async with TestClient(app) as client:
            response = await client.get("/secret")
        assert response.status == 403
        assert response.text == "Forbidden"

    async def test_custom_error_handler(self) -> None:
        app = _app()

        @app.error(404)
        def missing(request):
            return Response(f"Custom missing: {request.path}")

        async with TestClient(app) as client:
            response = await client.get("/gone")
        assert response.status == 404
        assert response.text == "Custom missing: /gone"

    async def test_middleware_sees_every_response(self) -> None:
        app = _app()
        seen: list[int] = []

        async def record(request, next):
            response = await next(request)
            seen.append(response.status)
            return response.with_header("X-Seen", "1")

        app.add_middleware(record)

        @app.route("/")
        def index():
            return Response("ok")

        async with TestClient(app) as client:
            ok = await client.get("/")
            missing = await client.get("/missing")
        assert seen == [200, 404]
        assert ok.header("x-seen") == "1"
        assert missing.header("x-seen") == "1"

    async def test_middleware_order(self) -> None:
        app = _app()
        order: list[str] = []

        def tagger(tag):
            async def mw(request, next):
                order.append(f"{tag}-in")
                response = await next(request)
                order.append(f"{tag}-out")
                return response

            return mw

        app.add_middleware(tagger("outer"))
        app.add_middleware(tagger("inner"))

        @app.route("/")
        def index():
            order.append("handler")
            return Response("ok")

        async with TestClient(app) as client:
            await client.get("/")
        assert order == ["outer-in", "inner-in", "handler", "inner-out", "outer-out"]


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------


class TestFreeze:
    async def test_no_registration_after_first_request(self) -> None:
        app = _app()

        @app.route("/")
        def index():
            return Response("ok")

        async with TestClient(app) as client:
            await client.get("/")

        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.route("/late")(lambda: "late")
        with pytest.raises(RuntimeError):
            app.add_middleware(lambda request, next: next(request))

    def test_routes_listing(self) -> None:
        app = _app()

        @app.route("/", name="home")
        def index():
            return "home"

        @app.route("/about")
        def about():
            return "about"

        assert [(r.pattern, r.name) for r in app.routes] == [("/", "home"), ("/about", None)]

    def test_db_requires_configuration(self) -> None:
        with pytest.raises(RuntimeError, match="No database configured"):
            _ = _app().db

    def test_db_from_config_url(self, tmp_path) -> None:
        app = _app(database=f"sqlite:///{tmp_path / 'x.db'}")
        assert app.db.url.endswith("x.db")


async def _lifespan_exchange(app: App) -> list[dict[str, Any]]:
    """Drive startup then shutdown through the ASGI lifespan protocol."""
    sent: list[dict[str, Any]] = []
    incoming: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def receive() -> dict[str, Any]:
        return await incoming.get()

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    await incoming.put({"type": "lifespan.startup"})
    await incoming.put({"type": "lifespan.shutdown"})
    await asyncio.wait_for(app({"type": "lifespan"}, receive, send), timeout=5.0)
    return sent


class TestLifespan:
    async def test_hooks_run_in_order(self) -> None:
        app = _app()
        events: list[str] = []

        @app.on_startup
        async def setup():
            events.append("startup")

        @app.on_shutdown
        def teardown():
            events.append("shutdown")

        sent = await _lifespan_exchange(app)
        assert events == ["startup", "shutdown"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_startup_failure_reported(self) -> None:
        app = _app()

        @app.on_startup
        def explode():
            raise RuntimeError("no database")

        sent = await _lifespan_exchange(app)
        assert sent == [{"type": "lifespan.startup.failed", "message": "no database"}]

    async def test_startup_migrates_database(self, tmp_path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "001_notes.sql").write_text("CREATE TABLE notes (id INTEGER PRIMARY KEY);")
        app = _app(database=f"sqlite:///{tmp_path / 'app.db'}", migrations_dir=migrations)
        count: list[int] = []

        @app.on_startup
        async def check():
            count.append(await app.db.fetch_val("SELECT COUNT(*) FROM notes"))

        await _lifespan_exchange(app)
        assert count == [0]
        assert not app.db.is_connected
