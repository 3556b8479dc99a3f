"""The switchboard service — route registration and ASGI entry point.

Mutable during setup (routes, mounts, fallback, lifecycle hooks).
Frozen when the first ASGI call arrives.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from switchboard._internal.asgi import ASGIApp, Receive, Scope, Send
from switchboard._internal.types import FallbackHandler, Handler
from switchboard.config import ServiceConfig
from switchboard.errors import ConfigurationError
from switchboard.routing.binder import Binder, build_binder, build_method_binder
from switchboard.routing.mount import Mount
from switchboard.routing.pattern import PathPattern
from switchboard.routing.route import Route
from switchboard.routing.router import Router
from switchboard.serialization.registry import CodecRegistry, default_registry
from switchboard.server.handler import default_fallback, handle_request

logger = logging.getLogger("switchboard.routing")

_Methods = str | Iterable[str] | None


class Service:
    """An ordered table of routes served over ASGI.

    Usage::

        service = Service(ServiceConfig(root="/blobstore"))

        @service.get("/{item_id}", name="item")
        def read(ctx: Context, item_id: int) -> None:
            ctx.respond(store[item_id])

        @service.post("/", body=Item)
        def create(ctx: Context, item: Item) -> None:
            ctx.respond(store.add(item), status=201)

        service.url_for("item", item_id=7)   # "/blobstore/7"

    Routes are tried in registration order. Templates compile as they
    are registered, so a malformed one fails at import time.

    Thread safety:
        Registration is single-threaded setup work. The freeze
        transition uses a Lock + double-check so exactly one thread
        freezes the table, even when several ASGI workers receive
        their first request at once. After that the route table and
        codec registry are only read.
    """

    __slots__ = (
        "_fallback",
        "_freeze_lock",
        "_frozen",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "registry",
        "root",
    )

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        registry: CodecRegistry | None = None,
        root: str | None = None,
    ) -> None:
        self.config: ServiceConfig = config or ServiceConfig()
        self.root: str = root if root is not None else self.config.root
        self.registry: CodecRegistry = registry if registry is not None else default_registry()
        self._router = Router()
        self._fallback: FallbackHandler = default_fallback
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: _Methods = None,
        body: Any = None,
        name: str | None = None,
        prefix: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: Path template, appended to the service root. Use ``{name}``
                for one segment and ``{name:path}`` for the rest of the path.
            methods: HTTP method(s). ``None`` accepts any method.
            body: Type to decode the request body into. The decoded value
                is passed right after the context.
            name: Route name for ``url_for()``.
            prefix: Match any path that starts with the template.
        """

        def decorator(func: Handler) -> Handler:
            self.add_route(path, func, methods=methods, body=body, name=name, prefix=prefix)
            return func

        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        """Register a GET route via decorator."""
        return self.route(path, methods="GET", **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        """Register a POST route via decorator."""
        return self.route(path, methods="POST", **kwargs)

    def put(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        """Register a PUT route via decorator."""
        return self.route(path, methods="PUT", **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        """Register a PATCH route via decorator."""
        return self.route(path, methods="PATCH", **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        """Register a DELETE route via decorator."""
        return self.route(path, methods="DELETE", **kwargs)

    def add_route(
        self,
        path: str,
        handler: Handler,
        *,
        methods: _Methods = None,
        body: Any = None,
        name: str | None = None,
        prefix: bool = False,
    ) -> Route:
        """Register *handler* for *path* and return the compiled route."""
        pattern = self._compile(path, prefix=prefix)
        binder = build_binder(
            handler,
            param_count=len(pattern.param_names),
            takes_body=body is not None,
            strict=self.config.strict_handlers,
        )
        return self._add(pattern, binder, methods=methods, body=body, name=name)

    def add_method(
        self,
        path: str,
        target: object,
        method_name: str,
        *,
        methods: _Methods = None,
        body: Any = None,
        name: str | None = None,
        prefix: bool = False,
    ) -> Route:
        """Register ``target.<method_name>`` as the handler for *path*.

        Raises ``ConfigurationError`` if *target* has no such method.
        """
        pattern = self._compile(path, prefix=prefix)
        binder = build_method_binder(
            target,
            method_name,
            param_count=len(pattern.param_names),
            takes_body=body is not None,
            strict=self.config.strict_handlers,
        )
        return self._add(pattern, binder, methods=methods, body=body, name=name)

    def mount(
        self,
        path: str,
        app: ASGIApp,
        *,
        name: str | None = None,
        methods: _Methods = None,
    ) -> Route:
        """Delegate every path under *path* to another ASGI app.

        The mounted app sees the remainder as ``path`` and the prefix
        appended to ``root_path``. Mounting another ``Service`` nests
        route tables.
        """
        if app is self:
            msg = "A service cannot be mounted inside itself."
            raise ConfigurationError(msg)
        pattern = self._compile(path, prefix=True)
        return self._add(pattern, Mount(app), methods=methods, body=None, name=name)

    # -- Fallback --

    def fallback(self, handler: FallbackHandler) -> FallbackHandler:
        """Set the handler for requests no route accepts.

        Usable as a decorator. The handler receives the ``Context`` only::

            @service.fallback
            def not_found(ctx: Context) -> None:
                ctx.fail(404, f"nothing at {ctx.request.path}")
        """
        self._check_not_frozen()
        if not callable(handler):
            msg = f"Fallback handler must be callable, got {type(handler).__name__}"
            raise ConfigurationError(msg)
        self._fallback = handler
        return handler

    # -- Reverse routing --

    def url_for(self, name: str, /, **values: object) -> str:
        """Render the concrete path of the route named *name*.

        Raises ``LookupError`` for an unknown name and ``RenderError``
        when a placeholder value is missing or invalid.
        """
        return self._router.url_for(name, **values)

    @property
    def routes(self) -> list[Route]:
        """Registered routes, in match-priority order."""
        return self._router.routes

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a function to run when the ASGI server starts.

        Sync or async; runs once during the lifespan startup phase.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a function to run when the ASGI server shuts down."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            registry=self.registry,
            fallback=self._fallback,
            config=self.config,
        )

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the service at startup (before the first HTTP request),
        then runs startup/shutdown hooks and reports back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _compile(self, path: str, *, prefix: bool) -> PathPattern:
        self._check_not_frozen()
        return PathPattern.compile(self.root + path, prefix=prefix)

    def _add(
        self,
        pattern: PathPattern,
        dispatcher: Binder | Mount,
        *,
        methods: _Methods,
        body: Any,
        name: str | None,
    ) -> Route:
        route = Route(
            pattern=pattern,
            dispatcher=dispatcher,
            methods=_normalize_methods(methods),
            body_type=body,
            name=name,
        )
        self._router.add(route)
        logger.debug("Registered %s", route)
        return route

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Freeze the route table. MUST only be called while holding _freeze_lock."""
        self._router.compile()
        self._frozen = True
        logger.debug("Route table frozen with %d route(s)", len(self._router))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the service after it has started serving requests. "
                "Register routes, mounts, and hooks before the first request."
            )
            raise RuntimeError(msg)


def _normalize_methods(methods: _Methods) -> frozenset[str]:
    if methods is None:
        return frozenset()
    if isinstance(methods, str):
        return frozenset({methods.upper()})
    return frozenset(m.upper() for m in methods)
