"""Typed conversion between decoded wire data and Python values.

Codecs produce plain data (dicts, lists, strings, numbers). ``structure``
turns that into the body type a route declares; ``unstructure`` goes the
other way before encoding a response.

Supported targets: dataclasses, ``str``, ``int``, ``float``, ``bool``,
``bytes``, width-annotated ints (``Int8`` …), ``list[T]``,
``tuple[T, ...]``, ``dict[str, T]``, ``T | None`` and other unions,
and ``Any``.

Dataclass fields map to wire keys by name, or by
``field(metadata={"alias": "Name"})`` when the wire name differs.
Unknown keys are ignored. Missing keys fall back to the field default
and fail when there is none.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping
from typing import Annotated, Any, Union

from switchboard.errors import DecodeError
from switchboard.routing.params import IntType


def wire_name(f: dataclasses.Field[Any]) -> str:
    """The key a dataclass field uses on the wire."""
    return f.metadata.get("alias", f.name)


def structure[T](value: Any, target: type[T] | Any) -> T:
    """Convert decoded *value* into an instance of *target*.

    Raises ``DecodeError`` when the shape or types don't fit.
    """
    return _structure(value, target, "$")


def _structure(value: Any, target: Any, where: str) -> Any:
    if target is Any or target is object or target is None:
        return value

    origin = typing.get_origin(target)

    if origin is Annotated:
        base, *meta = typing.get_args(target)
        result = _structure(value, base, where)
        for m in meta:
            if isinstance(m, IntType) and not m.min <= result <= m.max:
                raise DecodeError(f"{where}: {result} out of range for {m.name}")
        return result

    if origin is Union or origin is types.UnionType:
        return _structure_union(value, typing.get_args(target), where)

    if origin is list:
        (item_type,) = typing.get_args(target) or (Any,)
        if not isinstance(value, (list, tuple)):
            raise _mismatch(value, "array", where)
        return [_structure(v, item_type, f"{where}[{i}]") for i, v in enumerate(value)]

    if origin is tuple:
        return _structure_tuple(value, typing.get_args(target), where)

    if origin is dict:
        key_type, item_type = typing.get_args(target) or (str, Any)
        if not isinstance(value, Mapping):
            raise _mismatch(value, "object", where)
        return {
            _structure(k, key_type, where): _structure(v, item_type, f"{where}.{k}")
            for k, v in value.items()
        }

    if isinstance(target, type) and dataclasses.is_dataclass(target):
        return _structure_dataclass(value, target, where)

    return _structure_scalar(value, target, where)


def _structure_scalar(value: Any, target: Any, where: str) -> Any:
    if target is bool:
        if isinstance(value, bool):
            return value
        raise _mismatch(value, "bool", where)

    if target is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise _mismatch(value, "int", where)

    if target is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise _mismatch(value, "float", where)

    if target is str:
        if isinstance(value, str):
            return value
        raise _mismatch(value, "str", where)

    if target is bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        raise _mismatch(value, "bytes", where)

    if isinstance(target, type):
        if isinstance(value, target):
            return value
        raise _mismatch(value, target.__name__, where)

    msg = f"{where}: unsupported target type {target!r}"
    raise DecodeError(msg)


def _structure_union(value: Any, arms: tuple[Any, ...], where: str) -> Any:
    if value is None:
        if type(None) in arms:
            return None
        raise _mismatch(value, " | ".join(_label(a) for a in arms), where)
    for arm in arms:
        if arm is type(None):
            continue
        try:
            return _structure(value, arm, where)
        except DecodeError:
            continue
    raise _mismatch(value, " | ".join(_label(a) for a in arms), where)


def _structure_tuple(value: Any, args: tuple[Any, ...], where: str) -> tuple[Any, ...]:
    if not isinstance(value, (list, tuple)):
        raise _mismatch(value, "array", where)
    if len(args) == 2 and args[1] is Ellipsis:
        return tuple(_structure(v, args[0], f"{where}[{i}]") for i, v in enumerate(value))
    if not args:
        return tuple(value)
    if len(args) != len(value):
        msg = f"{where}: expected {len(args)} items, got {len(value)}"
        raise DecodeError(msg)
    return tuple(
        _structure(v, t, f"{where}[{i}]") for i, (v, t) in enumerate(zip(value, args, strict=True))
    )


def _structure_dataclass(value: Any, cls: type, where: str) -> Any:
    if not isinstance(value, Mapping):
        raise _mismatch(value, cls.__name__, where)

    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except NameError:
        hints = {f.name: f.type for f in dataclasses.fields(cls)}
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        key = wire_name(f)
        if key not in value:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                msg = f"{where}: missing field {key!r} for {cls.__name__}"
                raise DecodeError(msg)
            continue
        kwargs[f.name] = _structure(value[key], hints.get(f.name, Any), f"{where}.{key}")

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"{where}: {exc}") from exc


def unstructure(value: Any) -> Any:
    """Convert dataclasses and tuples into plain data for encoding."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            wire_name(f): unstructure(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {k: unstructure(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [unstructure(v) for v in value]
    return value


def _label(target: Any) -> str:
    if target is type(None):
        return "null"
    return getattr(target, "__name__", None) or repr(target)


def _mismatch(value: Any, expected: str, where: str) -> DecodeError:
    return DecodeError(f"{where}: expected {expected}, got {type(value).__name__}")
