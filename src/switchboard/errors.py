"""Switchboard exception hierarchy.

Shared across the router, binder, codec registry, and request pipeline
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class SwitchboardError(Exception):
    """Base for all switchboard-specific errors."""


class ConfigurationError(SwitchboardError):
    """Raised when service setup is invalid.

    Surfaces during route registration, before the first request.
    """


class CompileError(ConfigurationError):
    """A path template could not be compiled."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid path template {template!r}: {reason}")


class ArityError(ConfigurationError):
    """A handler's declared parameter count disagrees with its route.

    Indicates a registration mistake, never a client fault. Answered
    with a 500 and never retried against another route.
    """

    def __init__(self, handler_name: str, expected: int, declared: int) -> None:
        self.handler_name = handler_name
        self.expected = expected
        self.declared = declared
        super().__init__(
            f"Handler {handler_name!r} declares {declared} parameter(s), "
            f"route supplies {expected}"
        )


class CoercionError(SwitchboardError, ValueError):
    """A captured path parameter cannot be converted to its declared type.

    The route is treated as not matching; scanning continues.
    """

    def __init__(self, value: str, type_name: str, reason: str = "") -> None:
        self.value = value
        self.type_name = type_name
        detail = f"Cannot convert {value!r} to {type_name}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)


class RenderError(SwitchboardError):
    """A concrete path could not be rendered from a template."""


class UnsupportedContentTypeError(SwitchboardError):
    """No codec is registered for a negotiated or declared content type."""

    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(f"unsupported content type: {content_type or '<none>'}")


class DecodeError(SwitchboardError):
    """Request body bytes do not parse as the declared type."""


class EncodeError(SwitchboardError):
    """A value could not be encoded for the negotiated content type."""


@dataclass(frozen=True, slots=True)
class HTTPError(SwitchboardError):
    """An error that maps directly to an HTTP status code.

    Handlers may raise these; the pipeline answers with an error
    envelope carrying ``status`` and ``detail``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """400 — the request cannot be processed as sent."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class PayloadTooLarge(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """413 — the request body exceeds ``max_content_length``."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            status=413,
            detail=f"Request body exceeds {limit} bytes",
        )
