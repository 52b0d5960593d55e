"""Immutable HTTP request.

Frozen metadata with async, cached body access. Built once per request
from the ASGI scope; the path never carries the query string.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from lighthouse._internal.asgi import Receive
from lighthouse.http.cookies import parse_cookies
from lighthouse.http.headers import Headers
from lighthouse.http.params import FormData, QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Body access goes through ``body()``, ``form()`` and ``json()``; the
    ASGI receive channel is drained once and the result cached.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    client: tuple[str, int] | None
    cookies: Mapping[str, str]
    path_params: dict[str, str] = field(default_factory=dict)

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_fragment(self) -> bool:
        """True for htmx requests (``HX-Request: true``)."""
        return self.headers.get("hx-request") == "true"

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def client_ip(self) -> str:
        """Remote address, ``"unknown"`` when the server did not report one."""
        return self.client[0] if self.client else "unknown"

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query:
            pairs = "&".join(f"{k}={v}" for k in self.query for v in self.query.get_list(k))
            return f"{self.path}?{pairs}"
        return self.path

    async def body(self) -> bytes:
        if "body" in self._cache:
            return self._cache["body"]
        chunks = [chunk async for chunk in self.stream()]
        self._cache["body"] = result = b"".join(chunks)
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def form(self) -> FormData:
        """Parse a URL-encoded body.

        Other content types yield an empty ``FormData``; the demo forms
        never upload files.
        """
        if "form" in self._cache:
            return self._cache["form"]
        ctype = (self.content_type or "application/x-www-form-urlencoded").split(";")[0]
        if ctype.strip().lower() == "application/x-www-form-urlencoded":
            result = FormData.parse(await self.body())
        else:
            result = FormData()
        self._cache["form"] = result
        return result

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive | None = None) -> Request:
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope.get("method", "GET").upper(),
            path=scope.get("path", "/").split("?", 1)[0] or "/",
            headers=headers,
            query=QueryParams.parse(scope.get("query_string", b""), "latin-1"),
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )
