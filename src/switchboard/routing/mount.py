"""Mounts — delegate a path subtree to another ASGI application.

A mount is a prefix route whose dispatcher forwards the request with the
matched prefix moved from ``path`` to ``root_path``, the same way ASGI
servers present an app mounted below a URL prefix::

    /api/items/42   (mounted at /api)
    -> path="/items/42", root_path="/api"

The mounted app (often another ``Service``) writes its own response.
"""

import functools
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from switchboard._internal.asgi import ASGIApp, Scope


@dataclass(frozen=True, slots=True)
class Mount:
    """Dispatcher that forwards to a mounted ASGI app."""

    app: ASGIApp

    def check_arity(self, param_count: int) -> None:
        """Mounts take any number of captures."""

    def bind(
        self,
        context: Any,
        args: Sequence[str],
        body: Any = None,
    ) -> Callable[[], Awaitable[Any]]:
        """Mounts accept any captures and never reject a match."""
        return functools.partial(self._forward, context)

    async def _forward(self, context: Any) -> None:
        request = context.request
        scope = mounted_scope(request._scope, context.matched)
        await self.app(scope, request._receive, context.send)


def mounted_scope(scope: Scope, matched: str) -> Scope:
    """Copy *scope* with *matched* moved from ``path`` to ``root_path``."""
    prefix = matched.rstrip("/")
    path = scope["path"][len(prefix) :]
    if not path.startswith("/"):
        path = "/" + path
    child = dict(scope)
    child["path"] = path
    child["raw_path"] = path.encode("utf-8")
    child["root_path"] = scope.get("root_path", "") + prefix
    return child
