"""HTTP response with a chainable ``.with_*()`` transformation API.

Each transformation returns a new Response. Content responses also
carry how they should be finished: whether the page layout wraps them,
which layout, and which metadata overrides apply.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from lighthouse.http.cookies import SetCookie


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    ``wrap`` marks page content: the request handler renders it inside
    ``layout`` (or the app default) unless the request is an htmx
    fragment request. ``meta`` overrides the default page metadata.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()
    wrap: bool = False
    layout: str | None = None
    meta: Mapping[str, str] = field(default_factory=dict)

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> Response:
        cookie = SetCookie(
            name=name,
            value=value,
            max_age=max_age,
            path=path,
            secure=secure,
            httponly=httponly,
            samesite=samesite,
        )
        return replace(self, cookies=(*self.cookies, cookie))

    def without_cookie(self, name: str, path: str = "/") -> Response:
        return replace(self, cookies=(*self.cookies, SetCookie.expired(name, path=path)))

    def with_body(self, body: str | bytes) -> Response:
        """Replace the body, keeping status, headers and cookies."""
        return replace(self, body=body, wrap=False)

    def header(self, name: str) -> str | None:
        """First value set for *name* (case-insensitive), or None."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect. Sent as-is, never wrapped in a layout."""

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()
