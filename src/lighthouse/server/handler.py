"""ASGI handler: translates ASGI scope/messages to lighthouse types.

The only component that touches raw ASGI directly. Each request runs
the same lifecycle:

1. Build the immutable ``Request`` and set the request context.
2. Run the middleware chain around route dispatch.
3. Turn errors into responses (404 view, redirects, generic 500).
4. Render: wrap page content in its layout unless htmx asked for a
   fragment.
5. Send the response.

Dispatch, error conversion and rendering happen inside the middleware
chain so session-backed template globals still see the request's
session; failures raised by middleware itself are handled outside it.
"""

import inspect
from collections.abc import Callable
from contextvars import Token
from dataclasses import replace
from typing import Any

from kida import Environment

from lighthouse._internal.asgi import Receive, Scope, Send
from lighthouse._internal.invoke import invoke
from lighthouse.config import AppConfig
from lighthouse.context import config_var, request_var
from lighthouse.errors import HTTPError
from lighthouse.http.request import Request
from lighthouse.http.response import Response
from lighthouse.middleware.protocol import AnyResponse, Next
from lighthouse.routing.route import RouteMatch
from lighthouse.routing.router import Router
from lighthouse.server.errors import handle_http_error, handle_internal_error
from lighthouse.server.layout import finalize
from lighthouse.server.negotiation import negotiate
from lighthouse.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)
    config_token: Token[AppConfig] = config_var.set(config)

    try:

        async def dispatch(req: Request) -> AnyResponse:
            try:
                match = router.match(req.path)
                response = await _invoke_handler(match, req, kida_env=kida_env)
            except HTTPError as exc:
                response = await handle_http_error(exc, req, error_handlers, kida_env, config)
            except Exception as exc:
                response = await handle_internal_error(exc, req, error_handlers, kida_env, config)
            return finalize(response, req, kida_env, config)

        handler = dispatch
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, kida_env, config)
        response = finalize(response, request, kida_env, config)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, kida_env, config)
        response = finalize(response, request, kida_env, config)
    finally:
        config_var.reset(config_token)
        request_var.reset(token)

    await send_response(response, send)


async def _invoke_handler(
    match: RouteMatch,
    request: Request,
    *,
    kida_env: Environment | None = None,
) -> Response:
    """Call the matched route handler and negotiate its return value."""
    request = replace(request, path_params=match.path_params)
    args, kwargs = build_handler_args(match.route.handler, request, match.args)
    result = await invoke(match.route.handler, *args, **kwargs)
    return negotiate(result, kida_env=kida_env)


def build_handler_args(
    handler: Callable[..., Any],
    request: Request,
    captures: tuple[str, ...],
) -> tuple[list[Any], dict[str, Any]]:
    """Line captured path segments up with the handler's parameters.

    Captures fill positional parameters in order. A parameter named
    ``request`` (or annotated ``Request``) receives the request instead
    and does not consume a capture. ``*args`` absorbs any extras.
    """
    sig = inspect.signature(handler, eval_str=True)
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    remaining = list(captures)

    for name, param in sig.parameters.items():
        wants_request = name == "request" or param.annotation is Request
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            args.extend(remaining)
            remaining.clear()
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            if wants_request:
                kwargs[name] = request
        elif param.kind is inspect.Parameter.VAR_KEYWORD:
            continue
        elif wants_request:
            args.append(request)
        elif remaining:
            args.append(remaining.pop(0))

    return args, kwargs
