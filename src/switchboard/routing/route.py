"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from switchboard.routing.pattern import PathPattern


class Dispatcher(Protocol):
    """Anything a route can hand a matched request to.

    ``Binder`` (handler functions) and ``Mount`` (delegated ASGI apps)
    both satisfy this shape.
    """

    def check_arity(self, param_count: int) -> None: ...

    def bind(
        self,
        context: Any,
        args: Sequence[str],
        body: Any = ...,
    ) -> Callable[[], Awaitable[Any]]: ...


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled route. Created during setup, never mutated afterwards.

    An empty ``methods`` set accepts every HTTP method.
    """

    pattern: PathPattern
    dispatcher: Dispatcher
    methods: frozenset[str] = frozenset()
    body_type: Any = None
    name: str | None = None

    @property
    def path(self) -> str:
        return self.pattern.template

    @property
    def has_body(self) -> bool:
        return self.body_type is not None

    def accepts(self, method: str) -> bool:
        return not self.methods or method in self.methods

    def matches(self, method: str, path: str) -> tuple[str, ...] | None:
        """Captures for *path* if both method and path match, else ``None``."""
        if not self.accepts(method):
            return None
        return self.pattern.match(path)

    def url(self, **values: object) -> str:
        """Render a concrete path for this route."""
        return self.pattern.render(values)

    def __str__(self) -> str:
        methods = ",".join(sorted(self.methods)) or "*"
        return f"Route(name={self.name!r}, pattern={self.path!r}, methods={methods})"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a structural route match."""

    route: Route
    captures: tuple[str, ...]

    @property
    def matched(self) -> str:
        """The part of the request path the pattern consumed."""
        return self.captures[0]

    @property
    def args(self) -> tuple[str, ...]:
        """Placeholder captures in template order."""
        return self.captures[1:]

    @property
    def path_params(self) -> dict[str, str]:
        return self.route.pattern.params(self.captures)
