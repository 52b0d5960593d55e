"""Router with first-match-wins, registration-order path matching.

Routes are appended during setup and scanned linearly at dispatch.
There is no specificity ranking and no conflict detection: the earliest
registered pattern that matches the whole path wins.
"""

from lighthouse.errors import NotFound
from lighthouse.routing.route import Route, RouteMatch


class Router:
    """Ordered route table.

    Usage::

        router = Router()
        router.add(Route("/user/{id}", show_user))
        router.compile()
        match = router.match("/user/42")   # match.args == ("42",)
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Append a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._routes.append(route)

    @property
    def routes(self) -> list[Route]:
        """Registered routes in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, path: str) -> RouteMatch:
        """Match a request path (query string already stripped).

        Raises ``NotFound`` if no pattern matches.
        """
        for route in self._routes:
            m = route.regex.match(path)
            if m is not None:
                args = m.groups()
                return RouteMatch(
                    route=route,
                    args=args,
                    path_params=dict(zip(route.param_names, args, strict=True)),
                )
        raise NotFound(f"No route matches {path!r}")
