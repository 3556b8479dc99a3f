"""Switchboard: a typed-handler HTTP dispatcher for ASGI.

Routes are path templates tried in registration order. Captured path
segments are coerced to the handler's annotated parameter types, request
bodies are decoded by MIME type, and every response is a
``{status, error, data}`` envelope in the client's format.

Basic usage::

    from switchboard import Context, Service

    service = Service()

    @service.get("/items/{item_id}")
    def read(ctx: Context, item_id: int) -> None:
        ctx.respond({"id": item_id})

Serve with any ASGI server (``uvicorn module:service``).
"""

__version__ = "0.1.0"
__all__ = [
    "BadRequest",
    "CodecRegistry",
    "Context",
    "Envelope",
    "Float32",
    "Float64",
    "HTTPError",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "NotFound",
    "Service",
    "ServiceConfig",
    "SwitchboardError",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "default_registry",
    "get_context",
]

_WIDTH_TYPES = (
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchboard`` fast while providing a clean top-level API.
    """
    if name == "Service":
        from switchboard.service import Service

        return Service

    if name == "ServiceConfig":
        from switchboard.config import ServiceConfig

        return ServiceConfig

    if name in ("Context", "get_context"):
        from switchboard import context as _ctx

        return getattr(_ctx, name)

    if name in ("CodecRegistry", "Envelope", "default_registry"):
        from switchboard import serialization as _ser

        return getattr(_ser, name)

    if name in _WIDTH_TYPES:
        from switchboard.routing import params as _params

        return getattr(_params, name)

    if name in ("BadRequest", "HTTPError", "NotFound", "SwitchboardError"):
        from switchboard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
