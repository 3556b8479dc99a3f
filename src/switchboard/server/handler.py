"""ASGI request pipeline: route scan, arity check, decode, bind, invoke, send.

The only component that turns ASGI scopes into switchboard types and
back. Each request ends in exactly one of:

- the matched handler ran and its response was sent
- 500 (handler arity mismatch)
- 400 (body has no codec or does not decode)
- the fallback handler's response (default: 404)
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from switchboard._internal.asgi import Receive, Scope, Send
from switchboard._internal.invoke import invoke
from switchboard._internal.types import FallbackHandler
from switchboard.config import ServiceConfig
from switchboard.context import Context, current_context
from switchboard.errors import (
    ArityError,
    CoercionError,
    DecodeError,
    HTTPError,
    PayloadTooLarge,
    UnsupportedContentTypeError,
)
from switchboard.http.request import Request
from switchboard.http.response import Response
from switchboard.routing.binder import NO_BODY
from switchboard.routing.route import Route
from switchboard.routing.router import Router
from switchboard.serialization.envelope import Envelope
from switchboard.serialization.registry import CodecRegistry
from switchboard.server.errors import (
    handle_arity_error,
    handle_bad_request,
    handle_http_error,
    handle_internal_error,
)
from switchboard.server.negotiation import encode_envelope, encode_error
from switchboard.server.sender import send_response

logger = logging.getLogger("switchboard.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    registry: CodecRegistry,
    fallback: FallbackHandler,
    config: ServiceConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    _, response = await dispatch(
        request,
        send,
        router=router,
        registry=registry,
        fallback=fallback,
        config=config,
    )

    # None: a mounted app already sent its own response
    if response is not None:
        await send_response(response, send)


async def dispatch(
    request: Request,
    send: Send | None,
    *,
    router: Router,
    registry: CodecRegistry,
    fallback: FallbackHandler,
    config: ServiceConfig,
) -> tuple[Context, Response | None]:
    """Run the route scan for *request*.

    Returns the context that produced the response and the response to
    send, or ``None`` when a mounted app already streamed its own.
    """
    for match in router.iter_matches(request.method, request.path):
        route = match.route
        context = Context(request, match, registry, config, send)

        try:
            route.dispatcher.check_arity(len(match.args))
        except ArityError as exc:
            return context, handle_arity_error(exc, request, registry)

        body: Any = NO_BODY
        if route.has_body:
            try:
                body = await _decode_body(request, route, registry, config)
            except (UnsupportedContentTypeError, DecodeError) as exc:
                return context, handle_bad_request(exc, request, registry)
            except HTTPError as exc:
                return context, handle_http_error(exc, request, registry)

        try:
            call = route.dispatcher.bind(context, match.args, body)
        except ArityError as exc:
            return context, handle_arity_error(exc, request, registry)
        except CoercionError as exc:
            logger.debug(
                "%s %s does not bind to %s: %s",
                request.method,
                request.path,
                route.path,
                exc,
            )
            if config.fallthrough_on_coercion_error:
                continue
            break

        return context, await _run(context, call, config)

    logger.debug("%s %s: no route matched, using fallback", request.method, request.path)
    context = Context(request, None, registry, config, send)
    return context, await _run(context, lambda: invoke(fallback, context), config)


async def _run(
    context: Context,
    call: Callable[[], Awaitable[Any]],
    config: ServiceConfig,
) -> Response | None:
    """Invoke a bound handler with ``current_context`` set."""
    request = context.request
    registry = context.registry
    token = current_context.set(context)
    try:
        await call()
    except HTTPError as exc:
        return handle_http_error(exc, request, registry)
    except (UnsupportedContentTypeError, DecodeError) as exc:
        return handle_bad_request(exc, request, registry)
    except Exception as exc:
        return handle_internal_error(exc, request, registry, config.debug)
    finally:
        current_context.reset(token)

    if context.response is not None:
        return context.response
    if context.responded:
        return None
    return _empty_response(context)


async def _decode_body(
    request: Request,
    route: Route,
    registry: CodecRegistry,
    config: ServiceConfig,
) -> Any:
    """Read and decode the body as the route's declared type."""
    length = request.content_length
    if length is not None and length > config.max_content_length:
        raise PayloadTooLarge(config.max_content_length)
    # Fail on the content type before reading the stream
    registry.get(request.content_type)
    data = await request.body()
    if len(data) > config.max_content_length:
        raise PayloadTooLarge(config.max_content_length)
    return await registry.decode_async(
        request.content_type,
        data,
        route.body_type,
        offload_threshold=config.offload_threshold,
    )


def _empty_response(context: Context) -> Response:
    """200 with an empty success envelope, for handlers that wrote nothing."""
    try:
        return encode_envelope(Envelope.success(), context.request.headers, context.registry)
    except UnsupportedContentTypeError as exc:
        return encode_error(400, str(exc), context.request.headers, context.registry)


async def default_fallback(context: Context) -> None:
    """Answer unmatched requests with a 404 error envelope."""
    context.write(encode_error(404, "Not Found", context.request.headers, context.registry))
