"""Final rendering step: wrap page content in its layout.

Runs last for every request, on the success and the error path alike,
so a body is always produced. htmx requests (``HX-Request: true``)
receive the bare content.
"""

import logging
from dataclasses import replace

from kida import Environment

from lighthouse.config import AppConfig
from lighthouse.http.request import Request
from lighthouse.http.response import Response
from lighthouse.server.errors import error_location
from lighthouse.templating.integration import render_layout

logger = logging.getLogger("lighthouse.server")

CRITICAL_FAILURE = "Critical failure."


def finalize(
    response: Response,
    request: Request,
    kida_env: Environment | None,
    config: AppConfig,
) -> Response:
    """Return the response as it should be sent.

    Page content is wrapped in ``response.layout`` or the configured
    default layout, with the default metadata overridden by the view's.
    If the layout itself fails, the failure is logged and the body
    becomes ``"Critical failure."`` with status 500.
    """
    if not response.wrap:
        return response
    if request.is_fragment or kida_env is None:
        return replace(response, wrap=False)

    layout = response.layout or config.layout
    meta = {**config.meta, **response.meta}
    try:
        page = render_layout(kida_env, layout, response.text, meta)
    except Exception as exc:
        logger.error("%s in %s", exc, error_location(exc), exc_info=exc)
        return replace(response, body=CRITICAL_FAILURE, status=500, wrap=False)
    return response.with_body(page)
