"""View and Template return types.

Frozen dataclasses that handlers return. The negotiation layer renders
them with kida; only ``View`` output is page content that gets wrapped
in the layout.
"""

from dataclasses import dataclass, field
from typing import Any

# Context keys a view may set to override the page's default metadata
META_KEYS: tuple[str, ...] = ("title", "description", "author", "keywords", "charset", "canonical")


@dataclass(frozen=True, slots=True)
class View:
    """Render a view template as page content.

    The result is wrapped in the app layout, or *layout* when given,
    except for htmx requests, which receive the bare content. Context
    keys named in ``META_KEYS`` override the layout's default metadata::

        return View("login.html", title="Login", errors=errors, email=email)
        return View("dashboard.html", layout="_dashboard.html", user=user)
    """

    name: str
    layout: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, layout: str | None = None, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "layout", layout)
        object.__setattr__(self, "context", context)

    @property
    def meta(self) -> dict[str, str]:
        return {key: str(self.context[key]) for key in META_KEYS if key in self.context}


@dataclass(frozen=True, slots=True)
class Template:
    """Render a complete page template; never wrapped in the layout.

    Usage::

        return Template("standalone.html", title="Home")
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
