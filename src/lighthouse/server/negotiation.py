"""Content negotiation: maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable. Only ``View``
and ``str`` results are page content (``wrap=True``); everything else
is sent exactly as produced.
"""

import json
from typing import Any

from kida import Environment

from lighthouse.errors import ConfigurationError
from lighthouse.http.response import Redirect, Response
from lighthouse.templating.integration import render_template, render_view
from lighthouse.templating.returns import Template, View


def _require_env(kida_env: Environment | None, kind: str) -> Environment:
    if kida_env is None:
        msg = f"{kind} return type requires templates. Configure AppConfig.template_dir."
        raise ConfigurationError(msg)
    return kida_env


def negotiate(value: Any, *, kida_env: Environment | None = None) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> 302 with Location header
    3. ``View``             -> page content, wrapped in the layout later
    4. ``Template``         -> full page, not wrapped
    5. ``str``              -> page content, wrapped in the layout later
    6. ``bytes``            -> application/octet-stream
    7. ``dict`` / ``list``  -> application/json
    8. ``(value, int)``     -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case View():
            html = render_view(_require_env(kida_env, "View"), value)
            return Response(body=html, wrap=True, layout=value.layout, meta=value.meta)
        case Template():
            return Response(body=render_template(_require_env(kida_env, "Template"), value))
        case str():
            return Response(body=value, wrap=True)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (inner, int() as status):
            return negotiate(inner, kida_env=kida_env).with_status(status)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, dict, bytes, View, Template, Response, or Redirect."
            )
            raise TypeError(msg)
