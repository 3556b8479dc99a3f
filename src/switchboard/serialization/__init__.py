"""Serialization — pluggable codecs selected by MIME type.

Request bodies decode straight into the route's declared type; responses
always encode a ``{status, error, data}`` envelope.
"""

from switchboard.serialization.codecs import BSONCodec, Codec, JSONCodec, MsgPackCodec
from switchboard.serialization.envelope import Envelope
from switchboard.serialization.registry import CodecRegistry, default_registry
from switchboard.serialization.structure import structure, unstructure

__all__ = [
    "BSONCodec",
    "Codec",
    "CodecRegistry",
    "Envelope",
    "JSONCodec",
    "MsgPackCodec",
    "default_registry",
    "structure",
    "unstructure",
]
