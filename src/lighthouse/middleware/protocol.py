"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> AnyResponse: ...

No base class required. Middleware may transform the response through
the chainable ``.with_*()`` API before returning it.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from lighthouse.http.request import Request
from lighthouse.http.response import Response

type AnyResponse = Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Protocol for lighthouse middleware.

    Accepts both functions and callable objects::

        async def server_header(request: Request, next: Next) -> AnyResponse:
            response = await next(request)
            return response.with_header("Server", "lighthouse")
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
