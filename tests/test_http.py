"""Tests for the HTTP primitives: Request, Response, headers, params, cookies."""

import pytest

from lighthouse.http.cookies import SetCookie, parse_cookies
from lighthouse.http.headers import Headers
from lighthouse.http.params import FormData, QueryParams
from lighthouse.http.request import Request
from lighthouse.http.response import Redirect, Response


def _scope(**overrides):
    scope = {
        "type": "http",
        "method": "get",
        "path": "/users/42",
        "query_string": b"page=2&tag=a&tag=b",
        "headers": [
            (b"host", b"localhost"),
            (b"Content-Type", b"application/x-www-form-urlencoded"),
            (b"cookie", b"sid=abc; theme=dark"),
        ],
        "client": ("10.0.0.1", 5555),
    }
    scope.update(overrides)
    return scope


def _receive_chunks(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive():
        return messages.pop(0)

    return receive


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/html"),))
        assert headers["content-type"] == "text/html"
        assert headers.get("CONTENT-TYPE") == "text/html"
        assert "content-type" in headers

    def test_multiple_values(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("accept") == ["a", "b"]
        assert len(headers) == 1

    def test_missing(self) -> None:
        with pytest.raises(KeyError):
            Headers()["x"]


class TestParams:
    def test_query_multi_values(self) -> None:
        query = QueryParams.parse(b"tag=a&tag=b&empty=")
        assert query["tag"] == "a"
        assert query.get_list("tag") == ["a", "b"]
        assert query["empty"] == ""
        assert query.get_list("missing") == []

    def test_get_int(self) -> None:
        query = QueryParams.parse("page=3&bad=x")
        assert query.get_int("page") == 3
        assert query.get_int("bad", 1) == 1
        assert query.get_int("missing") is None

    def test_form_text_strips(self) -> None:
        form = FormData.parse(b"email=+a%40b.com+&name=")
        assert form.text("email") == "a@b.com"
        assert form.text("missing") == ""


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies("a=1; b=two ; junk; =x") == {"a": "1", "b": "two"}
        assert parse_cookies("") == {}

    def test_set_cookie_header(self) -> None:
        cookie = SetCookie("sid", "v", max_age=60, secure=True)
        assert cookie.to_header_value() == (
            "sid=v; Max-Age=60; Path=/; Secure; HttpOnly; SameSite=Lax"
        )

    def test_expired(self) -> None:
        assert "Max-Age=0" in SetCookie.expired("sid").to_header_value()


class TestRequest:
    def test_from_asgi(self) -> None:
        request = Request.from_asgi(_scope())
        assert request.method == "GET"
        assert request.path == "/users/42"
        assert request.query.get_list("tag") == ["a", "b"]
        assert request.cookies == {"sid": "abc", "theme": "dark"}
        assert request.client_ip == "10.0.0.1"
        assert request.url == "/users/42?page=2&tag=a&tag=b"

    def test_path_never_carries_query(self) -> None:
        request = Request.from_asgi(_scope(path="/a?b=c", query_string=b""))
        assert request.path == "/a"
        assert request.url == "/a"

    def test_unknown_client(self) -> None:
        assert Request.from_asgi(_scope(client=None)).client_ip == "unknown"

    def test_is_fragment(self) -> None:
        plain = Request.from_asgi(_scope())
        htmx = Request.from_asgi(_scope(headers=[(b"hx-request", b"true")]))
        assert plain.is_fragment is False
        assert htmx.is_fragment is True

    async def test_body_read_once_and_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b"email=a%40b.com", b"&x=1"))
        assert await request.body() == b"email=a%40b.com&x=1"
        assert await request.body() == b"email=a%40b.com&x=1"
        form = await request.form()
        assert form["email"] == "a@b.com"
        assert form["x"] == "1"

    async def test_non_form_body_gives_empty_form(self) -> None:
        scope = _scope(headers=[(b"content-type", b"application/json")])
        request = Request.from_asgi(scope, _receive_chunks(b'{"a": 1}'))
        assert len(await request.form()) == 0
        assert await request.json() == {"a": 1}

    async def test_no_receive_is_empty_body(self) -> None:
        assert await Request.from_asgi(_scope()).body() == b""


class TestResponse:
    def test_defaults(self) -> None:
        response = Response("hi")
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert response.wrap is False

    def test_chain_returns_new_objects(self) -> None:
        base = Response("x")
        changed = base.with_status(201).with_header("X-A", "1").with_cookie("c", "v")
        assert base.status == 200
        assert base.headers == ()
        assert changed.status == 201
        assert changed.header("x-a") == "1"
        assert changed.cookies[0].name == "c"

    def test_with_headers_and_without_cookie(self) -> None:
        response = Response().with_headers({"A": "1", "B": "2"}).without_cookie("sid")
        assert response.header("b") == "2"
        assert response.cookies[0].max_age == 0

    def test_with_body_clears_wrap(self) -> None:
        response = Response("page", wrap=True).with_body("<html></html>")
        assert response.wrap is False
        assert response.text == "<html></html>"

    def test_body_bytes_and_text(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"raw").text == "raw"
        assert Response("x").header("missing") is None

    def test_redirect_defaults(self) -> None:
        redirect = Redirect("/login")
        assert redirect.status == 302
        assert redirect.headers == ()
