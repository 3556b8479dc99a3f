"""Dispatch binder — turns captured strings into a handler call.

The handler signature is inspected once, at registration. The resulting
``Binder`` already holds one converter per path parameter, so binding a
request is a loop over prebuilt callables::

    def read(ctx: Context, item_id: int) -> None: ...

    binder = build_binder(read, param_count=1, takes_body=False)
    call = binder.bind(ctx, ("42",))   # coerces "42" -> 42
    await call()                        # read(ctx, 42)

Handlers receive, in order: the request context, the decoded body (only
when the route declares a body type), then the coerced path parameters
in template order.
"""

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from switchboard._internal.invoke import invoke
from switchboard._internal.types import Converter, Handler
from switchboard.errors import ArityError, CoercionError, ConfigurationError
from switchboard.routing.params import resolve_converter, type_name

logger = logging.getLogger("switchboard.routing")

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class _NoBody:
    """Sentinel: the route declares no request body."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_BODY"


NO_BODY: Any = _NoBody()


@dataclass(frozen=True, slots=True)
class _Unsupported:
    """Converter for a parameter whose declared type cannot be coerced."""

    type_name: str

    def __call__(self, value: str) -> Any:
        raise CoercionError(value, self.type_name, "unsupported argument type")


@dataclass(frozen=True, slots=True)
class Binder:
    """A handler plus the converters for its path parameters.

    Built once per route. ``bind()`` performs the per-request work:
    arity check, coercion, and packaging of the final call.
    """

    handler: Handler
    converters: tuple[Converter, ...]
    declared: int
    takes_body: bool

    @property
    def name(self) -> str:
        return getattr(self.handler, "__qualname__", None) or repr(self.handler)

    def expected(self, param_count: int) -> int:
        """Argument count the route will supply for *param_count* captures."""
        return 1 + int(self.takes_body) + param_count

    def check_arity(self, param_count: int) -> None:
        """Raise ``ArityError`` if the handler cannot take *param_count* captures."""
        expected = self.expected(param_count)
        if self.declared != expected:
            raise ArityError(self.name, expected, self.declared)

    def bind(
        self,
        context: Any,
        args: Sequence[str],
        body: Any = NO_BODY,
    ) -> Callable[[], Awaitable[Any]]:
        """Coerce *args* and return a thunk that invokes the handler.

        Raises ``ArityError`` if the handler cannot take this many
        arguments, ``CoercionError`` if any capture fails to convert.
        """
        self.check_arity(len(args))

        call_args: list[Any] = [context]
        if self.takes_body:
            call_args.append(body)
        for convert, raw in zip(self.converters, args, strict=True):
            call_args.append(convert(raw))

        return functools.partial(invoke, self.handler, *call_args)


def build_binder(
    handler: Handler,
    *,
    param_count: int,
    takes_body: bool,
    strict: bool = False,
) -> Binder:
    """Inspect *handler* and build its ``Binder``.

    Raises ``ConfigurationError`` for signatures that can never be bound
    (``*args``, ``**kwargs``, required keyword-only parameters). With
    ``strict=True`` arity mismatches and unsupported parameter types are
    also rejected here instead of at request time.
    """
    if not callable(handler):
        msg = f"Route handler must be callable, got {type(handler).__name__}"
        raise ConfigurationError(msg)

    name = getattr(handler, "__qualname__", None) or repr(handler)
    params = _signature(handler).parameters.values()

    positional: list[inspect.Parameter] = []
    for param in params:
        if param.kind in _POSITIONAL:
            positional.append(param)
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            if param.default is inspect.Parameter.empty:
                msg = f"Handler {name!r} has required keyword-only parameter {param.name!r}"
                raise ConfigurationError(msg)
        else:
            msg = f"Handler {name!r} uses {param}; variadic handlers cannot be bound"
            raise ConfigurationError(msg)

    declared = len(positional)
    expected = 1 + int(takes_body) + param_count
    if declared != expected:
        if strict:
            raise ArityError(name, expected, declared)
        logger.warning(
            "Handler %r declares %d parameter(s) but its route supplies %d; "
            "requests will be answered with 500",
            name,
            declared,
            expected,
        )

    offset = 1 + int(takes_body)
    converters: list[Converter] = []
    for param in positional[offset:]:
        converter = resolve_converter(param.annotation)
        if converter is None:
            label = type_name(param.annotation)
            if strict:
                msg = f"Handler {name!r} parameter {param.name!r} has unsupported type {label}"
                raise ConfigurationError(msg)
            logger.warning(
                "Handler %r parameter %r has unsupported type %s; the route will never match",
                name,
                param.name,
                label,
            )
            converter = _Unsupported(label)
        converters.append(converter)

    return Binder(
        handler=handler,
        converters=tuple(converters),
        declared=declared,
        takes_body=takes_body,
    )


def build_method_binder(
    target: object,
    method_name: str,
    *,
    param_count: int,
    takes_body: bool,
    strict: bool = False,
) -> Binder:
    """Build a ``Binder`` for ``target.<method_name>``.

    Raises ``ConfigurationError`` if the method does not exist.
    """
    method = getattr(target, method_name, None)
    if method is None or not callable(method):
        msg = f"{type(target).__name__} has no method {method_name!r}"
        raise ConfigurationError(msg)
    return build_binder(
        method,
        param_count=param_count,
        takes_body=takes_body,
        strict=strict,
    )


def _signature(handler: Handler) -> inspect.Signature:
    """Signature with string annotations resolved where possible."""
    try:
        return inspect.signature(handler, eval_str=True)
    except NameError:
        signature = inspect.signature(handler)

    # Some names only exist for type checkers; resolve the rest one by one
    namespace = getattr(handler, "__globals__", None) or {}
    params = [
        param.replace(annotation=_evaluate(param.annotation, namespace))
        for param in signature.parameters.values()
    ]
    return signature.replace(parameters=params)


def _evaluate(annotation: Any, namespace: dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, namespace)  # noqa: S307
    except NameError:
        # Annotations such as "uint8" name converters, not importable types
        return annotation
