"""Kida environment setup and rendering helpers.

The environment is created once during ``App._freeze()`` from the
app's config and registered globals, and passed through the request
pipeline from there.
"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader
from kida.utils.html import Markup

from lighthouse.config import AppConfig
from lighthouse.middleware.csrf import csrf_field, csrf_token
from lighthouse.security.auth import current_user
from lighthouse.templating.returns import Template, View

# Shared templates (404 page, default layout) bundled with the package
BUILTIN_TEMPLATES = Path(__file__).parent / "templates"


def create_environment(
    config: AppConfig,
    filters: Mapping[str, Callable[..., Any]] | None = None,
    globals_: Mapping[str, Any] | None = None,
) -> Environment:
    """Create a kida Environment from app configuration.

    The app's ``template_dir`` is searched first, so an app can replace
    any built-in template by shipping one with the same name.
    """
    loader = ChoiceLoader(
        [
            FileSystemLoader(str(config.template_dir)),
            FileSystemLoader(str(BUILTIN_TEMPLATES)),
        ]
    )
    env = Environment(
        loader=loader,
        autoescape=True,
        auto_reload=config.debug,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    if filters:
        env.update_filters(dict(filters))

    env.add_global("config", config)
    env.add_global("csrf_field", csrf_field)
    env.add_global("csrf_token", csrf_token)
    env.add_global("current_user", current_user)
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)
    return env


def render_template(env: Environment, tpl: Template) -> str:
    """Render a full template to string."""
    return env.get_template(tpl.name).render(tpl.context)


def render_view(env: Environment, view: View) -> str:
    """Render a view's own content (no layout)."""
    return env.get_template(view.name).render(view.context)


def render_layout(
    env: Environment,
    layout: str,
    content: str,
    meta: Mapping[str, str],
) -> str:
    """Wrap already rendered *content* in *layout*.

    The layout sees ``content`` as safe markup and the merged page
    metadata as ``meta`` (``{{ meta.title }}``).
    """
    return env.get_template(layout).render({"content": Markup(content), "meta": dict(meta)})
