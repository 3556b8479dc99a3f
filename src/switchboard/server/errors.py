"""Error handling pipeline for switchboard requests.

Every failure a request can hit is resolved here into a status code and
an error envelope. Nothing propagates past the request pipeline.

=============================  ======  =============================
Failure                        Status  Logged as
=============================  ======  =============================
UnsupportedContentTypeError    400     debug
DecodeError                    400     debug
HTTPError (raised by handler)  any     debug
ArityError                     500     error
unexpected exception           500     exception (with traceback)
=============================  ======  =============================
"""

import logging

from switchboard.errors import ArityError, HTTPError, SwitchboardError
from switchboard.http.request import Request
from switchboard.http.response import Response
from switchboard.serialization.registry import CodecRegistry
from switchboard.server.negotiation import encode_error

logger = logging.getLogger("switchboard.server")


def handle_bad_request(
    exc: SwitchboardError,
    request: Request,
    registry: CodecRegistry,
) -> Response:
    """400 for a body that has no codec or does not decode."""
    logger.debug("400 %s %s: %s", request.method, request.path, exc)
    return encode_error(400, str(exc), request.headers, registry)


def handle_http_error(
    exc: HTTPError,
    request: Request,
    registry: CodecRegistry,
) -> Response:
    """Map an HTTPError raised by a handler to an error envelope."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    detail = exc.detail or f"Error {exc.status}"
    response = encode_error(exc.status, detail, request.headers, registry)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_arity_error(
    exc: ArityError,
    request: Request,
    registry: CodecRegistry,
) -> Response:
    """500 for a handler registered with the wrong number of parameters."""
    logger.error("500 %s %s: %s", request.method, request.path, exc)
    return encode_error(500, "Invalid number of args", request.headers, registry)


def handle_internal_error(
    exc: Exception,
    request: Request,
    registry: CodecRegistry,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)
    detail = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return encode_error(500, detail, request.headers, registry)
