"""Route and RouteMatch frozen dataclasses, plus pattern compilation."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def compile_pattern(pattern: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Compile a route pattern into an anchored regex.

    Literal text is escaped; each ``{name}`` becomes ``([^/]+)``, so a
    placeholder matches exactly one non-empty path segment::

        "/user/{id}" -> ^/user/([^/]+)$
    """
    names: list[str] = []
    parts: list[str] = []
    pos = 0
    for m in _PARAM.finditer(pattern):
        parts.append(re.escape(pattern[pos : m.start()]))
        parts.append("([^/]+)")
        names.append(m.group(1))
        pos = m.end()
    parts.append(re.escape(pattern[pos:]))
    return re.compile("^" + "".join(parts) + "$"), tuple(names)


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition: a path pattern and its handler.

    Routes are method-agnostic. A handler that serves both ``GET`` and
    ``POST`` branches on ``request.method`` itself.
    """

    pattern: str
    handler: Callable[..., Any]
    name: str | None = None
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    param_names: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        regex, names = compile_pattern(self.pattern)
        object.__setattr__(self, "regex", regex)
        object.__setattr__(self, "param_names", names)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``args`` holds the captured segments in pattern order, as strings.
    """

    route: Route
    args: tuple[str, ...]
    path_params: dict[str, str]
