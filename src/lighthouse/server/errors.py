"""Error handling pipeline for lighthouse requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or the defaults:

- 404 renders the not-found view.
- Other HTTP errors send their detail with their status and headers
  (``login_required`` uses this for its redirect).
- Anything else is logged with its location and replaced by a generic
  message with status 500.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from kida import Environment

from lighthouse.config import AppConfig
from lighthouse.errors import HTTPError
from lighthouse.http.request import Request
from lighthouse.http.response import Response
from lighthouse.server.negotiation import negotiate
from lighthouse.templating.returns import View

logger = logging.getLogger("lighthouse.server")

GENERIC_ERROR = "An unexpected error occurred."


def error_location(exc: BaseException) -> str:
    """``file:line`` of the frame that raised *exc*."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "<unknown>:0"
    last = frames[-1]
    return f"{last.filename}:{last.lineno}"


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())
    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()
    if inspect.isawaitable(result):
        result = await result
    return negotiate(result, kida_env=kida_env)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    config: AppConfig,
) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    if exc.status == 404 and kida_env is not None:
        response = negotiate(View(config.not_found_template), kida_env=kida_env)
    else:
        response = Response(body=html.escape(exc.detail or f"Error {exc.status}"))
    response = response.with_status(exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    config: AppConfig,
) -> Response:
    """Log an unexpected exception and answer with a generic 500."""
    logger.error("%s in %s", exc, error_location(exc), exc_info=exc)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        return (await call_error_handler(handler, request, exc, kida_env)).with_status(500)

    if config.debug:
        detail = "".join(traceback.format_exception(exc))
        body = f"<p>{GENERIC_ERROR}</p>\n<pre>{html.escape(detail)}</pre>"
        return Response(body=body, status=500, wrap=True)
    return Response(body=GENERIC_ERROR, status=500, wrap=True)
