"""Ordered route table.

Routes are tried in registration order; the first one whose method set
and path pattern both match wins, unless binding rejects it. Routes are
registered during setup and the table is frozen before serving.
"""

from collections.abc import Iterator

from switchboard.errors import ConfigurationError
from switchboard.routing.route import Route, RouteMatch


class Router:
    """Ordered route table with first-match semantics.

    Usage::

        router = Router()
        router.add(Route(PathPattern.compile("/items/{id}"), binder, frozenset({"GET"})))
        router.compile()
        for match in router.iter_matches("GET", "/items/42"):
            ...

    Thread safety:
        ``add()`` is setup-only. After ``compile()`` the table is read
        concurrently without locks; mutating it while serving is
        undefined and the caller's responsibility to avoid.
    """

    __slots__ = ("_compiled", "_names", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._names: dict[str, Route] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Append a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if route.name is not None:
            if route.name in self._names:
                existing = self._names[route.name]
                msg = f"Duplicate route name {route.name!r} ({existing.path!r} and {route.path!r})"
                raise ConfigurationError(msg)
            self._names[route.name] = route
        self._routes.append(route)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in match-priority order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def iter_matches(self, method: str, path: str) -> Iterator[RouteMatch]:
        """Yield every structurally matching route, in registration order.

        Lazy, so the caller can stop at the first route that binds.
        """
        for route in self._routes:
            captures = route.matches(method, path)
            if captures is not None:
                yield RouteMatch(route=route, captures=captures)

    def lookup(self, name: str) -> Route:
        """Return the route registered under *name*.

        Raises ``LookupError`` if there is none.
        """
        try:
            return self._names[name]
        except KeyError:
            msg = f"No route named {name!r}"
            raise LookupError(msg) from None

    def url_for(self, name: str, **values: object) -> str:
        """Render the concrete path of the route named *name*."""
        return self.lookup(name).url(**values)
