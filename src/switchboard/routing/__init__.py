"""Routing — path templates, parameter coercion, and the ordered route table.

Routes are registered during setup and frozen before the first request.
"""

from switchboard.routing.binder import NO_BODY, Binder, build_binder, build_method_binder
from switchboard.routing.mount import Mount
from switchboard.routing.params import (
    CONVERTERS,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    convert_param,
)
from switchboard.routing.pattern import PathPattern, parse_template
from switchboard.routing.route import Route, RouteMatch
from switchboard.routing.router import Router

__all__ = [
    "CONVERTERS",
    "NO_BODY",
    "Binder",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Mount",
    "PathPattern",
    "Route",
    "RouteMatch",
    "Router",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "build_binder",
    "build_method_binder",
    "convert_param",
    "parse_template",
]
