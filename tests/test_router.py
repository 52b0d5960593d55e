"""Tests for lighthouse.routing: ordered, first-match-wins path matching."""

import pytest

from lighthouse.errors import NotFound
from lighthouse.routing import Route, Router, compile_pattern


def _handler() -> str:
    return "ok"


def _other() -> str:
    return "other"


def _router(*patterns: str) -> Router:
    r = Router()
    for pattern in patterns:
        r.add(Route(pattern, _handler))
    r.compile()
    return r


class TestCompilePattern:
    def test_literal_is_anchored(self) -> None:
        regex, names = compile_pattern("/about")
        assert regex.pattern == "^/about$"
        assert names == ()

    def test_placeholder_becomes_segment_capture(self) -> None:
        regex, names = compile_pattern("/user/{id}")
        assert regex.pattern == "^/user/([^/]+)$"
        assert names == ("id",)

    def test_literal_text_is_escaped(self) -> None:
        regex, _ = compile_pattern("/files/a.b")
        assert regex.match("/files/a.b")
        assert not regex.match("/files/aXb")

    def test_multiple_placeholders(self) -> None:
        _, names = compile_pattern("/posts/{year}/{slug}")
        assert names == ("year", "slug")


class TestRouterMatch:
    def test_root(self) -> None:
        match = _router("/").match("/")
        assert match.args == ()
        assert match.path_params == {}

    def test_single_capture(self) -> None:
        match = _router("/user/{id}").match("/user/42")
        assert match.args == ("42",)
        assert match.path_params == {"id": "42"}

    def test_captures_are_strings(self) -> None:
        match = _router("/user/{id}").match("/user/007")
        assert match.args == ("007",)

    def test_capture_never_spans_slash(self) -> None:
        r = _router("/user/{id}")
        with pytest.raises(NotFound):
            r.match("/user/42/edit")

    def test_capture_needs_one_char(self) -> None:
        with pytest.raises(NotFound):
            _router("/user/{id}").match("/user/")

    def test_no_partial_match(self) -> None:
        r = _router("/about")
        with pytest.raises(NotFound):
            r.match("/about/team")
        with pytest.raises(NotFound):
            r.match("/x/about")

    def test_no_match_raises_not_found(self) -> None:
        with pytest.raises(NotFound) as exc_info:
            _router("/").match("/missing")
        assert exc_info.value.status == 404

    def test_first_registered_wins(self) -> None:
        r = Router()
        r.add(Route("/user/{id}", _handler))
        r.add(Route("/user/me", _other))
        r.compile()

        assert r.match("/user/me").route.handler is _handler

    def test_literal_first_shadows_later_param(self) -> None:
        r = Router()
        r.add(Route("/user/me", _other))
        r.add(Route("/user/{id}", _handler))
        r.compile()

        assert r.match("/user/me").route.handler is _other
        assert r.match("/user/7").route.handler is _handler

    def test_two_captures_positional(self) -> None:
        match = _router("/posts/{year}/{slug}").match("/posts/2024/hello")
        assert match.args == ("2024", "hello")


class TestRouterLifecycle:
    def test_routes_keep_registration_order(self) -> None:
        r = _router("/b", "/a", "/c")
        assert [route.pattern for route in r.routes] == ["/b", "/a", "/c"]

    def test_add_after_compile_raises(self) -> None:
        r = _router("/")
        with pytest.raises(RuntimeError, match="after compilation"):
            r.add(Route("/late", _handler))

    def test_routes_is_a_copy(self) -> None:
        r = _router("/")
        r.routes.clear()
        assert len(r.routes) == 1
