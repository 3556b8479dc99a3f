"""Built-in wire codecs.

Each codec converts between bytes and plain data for one MIME type.
Codecs hold no per-call state and are safe to share across requests.

=========================  ==============================  ===========
Content type               Codec                           Library
=========================  ==============================  ===========
``application/json``       ``JSONCodec``                   stdlib json
``application/x-msgpack``  ``MsgPackCodec``                msgpack
``application/bson``       ``BSONCodec``                   bson (pymongo)
=========================  ==============================  ===========
"""

import json as json_module
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import bson
from bson.errors import BSONError
import msgpack

from switchboard.errors import DecodeError, EncodeError


@runtime_checkable
class Codec(Protocol):
    """A bidirectional transform for one content type."""

    content_type: str

    def loads(self, data: bytes) -> Any: ...
    def dumps(self, value: Any) -> bytes: ...


class JSONCodec:
    """``application/json`` — UTF-8 JSON text."""

    __slots__ = ()

    content_type = "application/json"

    def loads(self, data: bytes) -> Any:
        try:
            return json_module.loads(data)
        except (UnicodeDecodeError, json_module.JSONDecodeError) as exc:
            raise DecodeError(f"invalid JSON: {exc}") from exc

    def dumps(self, value: Any) -> bytes:
        try:
            return json_module.dumps(value, default=str, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"cannot encode as JSON: {exc}") from exc


class MsgPackCodec:
    """``application/x-msgpack`` — compact binary MessagePack."""

    __slots__ = ()

    content_type = "application/x-msgpack"

    def loads(self, data: bytes) -> Any:
        try:
            return msgpack.unpackb(data, raw=False, strict_map_key=False)
        except Exception as exc:
            # msgpack documents that unpack may raise outside its own hierarchy
            raise DecodeError(f"invalid MessagePack: {exc}") from exc

    def dumps(self, value: Any) -> bytes:
        try:
            return msgpack.packb(value, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as exc:
            raise EncodeError(f"cannot encode as MessagePack: {exc}") from exc


class BSONCodec:
    """``application/bson`` — self-describing binary documents.

    BSON only encodes documents, so the top-level value must be a
    mapping. Response envelopes always are.
    """

    __slots__ = ()

    content_type = "application/bson"

    def loads(self, data: bytes) -> Any:
        try:
            return bson.decode(data)
        except (BSONError, ValueError) as exc:
            raise DecodeError(f"invalid BSON: {exc}") from exc

    def dumps(self, value: Any) -> bytes:
        if not isinstance(value, Mapping):
            msg = f"BSON top-level value must be a document, got {type(value).__name__}"
            raise EncodeError(msg)
        try:
            return bson.encode(value)
        except (BSONError, TypeError, OverflowError) as exc:
            raise EncodeError(f"cannot encode as BSON: {exc}") from exc
