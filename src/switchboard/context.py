"""Per-request context handed to every handler.

A ``Context`` carries what the route captured, the request, and the
means to write exactly one response::

    @service.get("/items/{item_id}")
    def read(ctx: Context, item_id: int) -> None:
        item = store.get(item_id)
        if item is None:
            ctx.fail(404, f"no item {item_id}")
            return
        ctx.respond(item)

``current_context`` exposes the active context to code called from a
handler without threading it through every signature.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from switchboard.errors import UnsupportedContentTypeError
from switchboard.http.response import Response, plain_text
from switchboard.serialization.envelope import Envelope
from switchboard.server.negotiation import encode_envelope

if TYPE_CHECKING:
    from collections.abc import Mapping

    from switchboard._internal.asgi import Send
    from switchboard.config import ServiceConfig
    from switchboard.http.request import Request
    from switchboard.routing.route import Route, RouteMatch
    from switchboard.serialization.registry import CodecRegistry

current_context: ContextVar[Context] = ContextVar("switchboard_context")
"""The context of the request being handled. Set by the request pipeline."""


def get_context() -> Context:
    """Return the current request context.

    Raises ``LookupError`` if called outside a handler.
    """
    return current_context.get()


class Context:
    """Request-scoped state for one handler invocation.

    Owned by a single request; never share it across requests or
    threads.
    """

    __slots__ = ("_response", "_sent", "_send", "config", "match", "registry", "request")

    def __init__(
        self,
        request: Request,
        match: RouteMatch | None,
        registry: CodecRegistry,
        config: ServiceConfig,
        send: Send | None = None,
    ) -> None:
        self.request = request
        self.match = match
        self.registry = registry
        self.config = config
        self._send = send
        self._response: Response | None = None
        self._sent = False

    # -- What matched --

    @property
    def route(self) -> Route | None:
        return self.match.route if self.match is not None else None

    @property
    def args(self) -> tuple[str, ...]:
        """Captured path strings in template order."""
        return self.match.args if self.match is not None else ()

    @property
    def params(self) -> dict[str, str]:
        """Captured path strings by placeholder name."""
        return self.match.path_params if self.match is not None else {}

    @property
    def matched(self) -> str:
        """The part of the path the route consumed."""
        return self.match.matched if self.match is not None else ""

    @property
    def remainder(self) -> str:
        """The part of the path after ``matched`` (non-empty for prefix routes)."""
        return self.request.path[len(self.matched) :]

    # -- Response state --

    @property
    def response(self) -> Response | None:
        return self._response

    @property
    def responded(self) -> bool:
        """True once a response has been written or streamed."""
        return self._response is not None or self._sent

    def write(self, response: Response) -> None:
        """Write a raw response. Only one response per request."""
        if self.responded:
            msg = "A response has already been written for this request."
            raise RuntimeError(msg)
        self._response = response

    def respond(
        self,
        data: Any = None,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Write a success envelope carrying *data*.

        If no codec matches the request's ``Accept``/``Content-Type``
        the response becomes a plain-text 400 instead.
        """
        self._write_envelope(Envelope.success(data, status), headers)

    def fail(
        self,
        status: int,
        error: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Write an error envelope."""
        self._write_envelope(Envelope.failure(status, error), headers)

    def _write_envelope(self, envelope: Envelope, headers: Mapping[str, str] | None) -> None:
        try:
            response = encode_envelope(envelope, self.request.headers, self.registry)
        except UnsupportedContentTypeError as exc:
            if envelope.ok:
                response = plain_text(str(exc), 400)
            else:
                response = plain_text(envelope.error or str(exc), envelope.status)
        if headers:
            response = response.with_headers(headers)
        self.write(response)

    # -- Request body --

    async def decode(self, target: Any = Any) -> Any:
        """Decode the request body as *target* using its ``Content-Type``.

        Raises ``UnsupportedContentTypeError`` or ``DecodeError``.
        """
        data = await self.request.body()
        return await self.registry.decode_async(
            self.request.content_type,
            data,
            target,
            offload_threshold=self.config.offload_threshold,
        )

    # -- Raw ASGI access (mounted apps) --

    @property
    def send(self) -> Send:
        """The ASGI send callable. Using it marks the response as streamed."""
        if self._send is None:
            msg = "This context has no ASGI send channel."
            raise RuntimeError(msg)
        if self.responded:
            msg = "A response has already been written for this request."
            raise RuntimeError(msg)
        self._sent = True
        return self._send

    def __repr__(self) -> str:
        route = self.route.path if self.route is not None else None
        return f"<Context {self.request.method} {self.request.path!r} route={route!r}>"
