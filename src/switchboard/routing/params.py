"""Path parameter type conversion.

Captured path strings are converted to the type a handler declares for
that position. Integer targets carry an explicit width so ``"128"`` is
rejected for an 8-bit signed parameter::

    def read(ctx, shard: Int8, item_id: int): ...

Plain ``int`` means a signed 64-bit integer and plain ``float`` a
64-bit float. ``str`` (or no annotation at all) passes the capture
through unchanged.
"""

import inspect
import math
import re
import struct
import typing
from dataclasses import dataclass
from typing import Annotated, Any

from switchboard._internal.types import Converter
from switchboard.errors import CoercionError

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class IntType:
    """A fixed-width integer target."""

    name: str
    bits: int
    signed: bool

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def __call__(self, value: str) -> int:
        pattern = _SIGNED_RE if self.signed else _UNSIGNED_RE
        if not pattern.fullmatch(value):
            raise CoercionError(value, self.name, "invalid syntax")
        # 64 bits never needs more than 20 significant digits
        digits = value.lstrip("+-").lstrip("0") or "0"
        if len(digits) > 20:
            raise CoercionError(value, self.name, "value out of range")
        result = -int(digits) if value.startswith("-") else int(digits)
        if not self.min <= result <= self.max:
            raise CoercionError(value, self.name, "value out of range")
        return result


@dataclass(frozen=True, slots=True)
class FloatType:
    """A fixed-width floating point target."""

    name: str
    bits: int

    def __call__(self, value: str) -> float:
        if not _FLOAT_RE.fullmatch(value):
            raise CoercionError(value, self.name, "invalid syntax")
        result = float(value)
        if math.isinf(result) and "inf" not in value.lower():
            raise CoercionError(value, self.name, "value out of range")
        if self.bits == 32 and math.isfinite(result):
            try:
                (result,) = struct.unpack("<f", struct.pack("<f", result))
            except OverflowError:
                raise CoercionError(value, self.name, "value out of range") from None
            if math.isinf(result):
                raise CoercionError(value, self.name, "value out of range")
        return result


def _identity(value: str) -> str:
    return value


Int8 = Annotated[int, IntType("int8", 8, signed=True)]
Int16 = Annotated[int, IntType("int16", 16, signed=True)]
Int32 = Annotated[int, IntType("int32", 32, signed=True)]
Int64 = Annotated[int, IntType("int64", 64, signed=True)]
UInt8 = Annotated[int, IntType("uint8", 8, signed=False)]
UInt16 = Annotated[int, IntType("uint16", 16, signed=False)]
UInt32 = Annotated[int, IntType("uint32", 32, signed=False)]
UInt64 = Annotated[int, IntType("uint64", 64, signed=False)]
Float32 = Annotated[float, FloatType("float32", 32)]
Float64 = Annotated[float, FloatType("float64", 64)]


# type name -> converter for each supported target
CONVERTERS: dict[str, Converter] = {
    "int8": IntType("int8", 8, signed=True),
    "int16": IntType("int16", 16, signed=True),
    "int32": IntType("int32", 32, signed=True),
    "int64": IntType("int64", 64, signed=True),
    "uint8": IntType("uint8", 8, signed=False),
    "uint16": IntType("uint16", 16, signed=False),
    "uint32": IntType("uint32", 32, signed=False),
    "uint64": IntType("uint64", 64, signed=False),
    "float32": FloatType("float32", 32),
    "float64": FloatType("float64", 64),
    "str": _identity,
}

# Python builtins and the width they stand for
_BUILTIN_TARGETS: dict[Any, str] = {
    int: "int64",
    float: "float64",
    str: "str",
}
_BUILTIN_NAMES: dict[str, str] = {t.__name__: name for t, name in _BUILTIN_TARGETS.items()}


def resolve_converter(annotation: Any) -> Converter | None:
    """Return the converter for a handler parameter annotation.

    Returns ``None`` when the annotation names an unsupported type.
    """
    if annotation is inspect.Parameter.empty:
        return _identity

    if typing.get_origin(annotation) is Annotated:
        for meta in annotation.__metadata__:
            if isinstance(meta, (IntType, FloatType)):
                return meta
        annotation = typing.get_args(annotation)[0]

    if isinstance(annotation, str):
        return CONVERTERS.get(_BUILTIN_NAMES.get(annotation, annotation))

    name = _BUILTIN_TARGETS.get(annotation)
    if name is None:
        return None
    return CONVERTERS[name]


def type_name(annotation: Any) -> str:
    """Human-readable name of an annotation, for messages."""
    if annotation is inspect.Parameter.empty:
        return "str"
    converter = resolve_converter(annotation)
    if isinstance(converter, (IntType, FloatType)):
        return converter.name
    return getattr(annotation, "__name__", None) or repr(annotation)


def convert_param(value: str, param_type: str) -> Any:
    """Convert a captured path parameter string to the named target type.

    Raises ``CoercionError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    return CONVERTERS[param_type](value)

