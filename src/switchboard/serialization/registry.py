"""Codec registry — content type to codec lookup.

Keys are exact MIME strings: ``application/json; charset=utf-8`` does
not match ``application/json``. Normalize upstream if you need that.

A registry is built once at startup and only read while serving, so
concurrent lookups need no locking::

    registry = default_registry()
    item = registry.decode("application/json", b'{"Name": "widget"}', Item)
    raw = registry.encode("application/x-msgpack", Envelope.success(item).to_wire())
"""

from collections.abc import Callable, Iterable
from typing import IO, Any

import anyio.to_thread

from switchboard.errors import UnsupportedContentTypeError
from switchboard.serialization.codecs import BSONCodec, Codec, JSONCodec, MsgPackCodec
from switchboard.serialization.structure import structure


class CodecRegistry:
    """Maps content-type strings to codecs."""

    __slots__ = ("_codecs",)

    def __init__(self, codecs: Iterable[Codec] = ()) -> None:
        self._codecs: dict[str, Codec] = {}
        for codec in codecs:
            self.register(codec)

    def register(self, codec: Codec, content_type: str | None = None) -> None:
        """Register *codec* under its own content type (or an explicit one)."""
        self._codecs[content_type or codec.content_type] = codec

    def get(self, content_type: str | None) -> Codec:
        """Return the codec for *content_type*.

        Raises ``UnsupportedContentTypeError`` if none is registered.
        """
        if content_type:
            codec = self._codecs.get(content_type)
            if codec is not None:
                return codec
        raise UnsupportedContentTypeError(content_type)

    def __contains__(self, content_type: object) -> bool:
        return content_type in self._codecs

    def __len__(self) -> int:
        return len(self._codecs)

    @property
    def content_types(self) -> tuple[str, ...]:
        return tuple(self._codecs)

    # -- bytes --

    def decode(self, content_type: str | None, data: bytes, target: Any = Any) -> Any:
        """Decode *data* and convert it to *target*.

        Raises ``UnsupportedContentTypeError`` or ``DecodeError``.
        """
        codec = self.get(content_type)
        return structure(codec.loads(data), target)

    def encode(self, content_type: str | None, value: Any) -> bytes:
        """Encode *value*.

        Raises ``UnsupportedContentTypeError`` or ``EncodeError``.
        """
        return self.get(content_type).dumps(value)

    # -- streams --

    def load(self, content_type: str | None, stream: IO[bytes], target: Any = Any) -> Any:
        """Decode everything readable from *stream*."""
        codec = self.get(content_type)
        return structure(codec.loads(stream.read()), target)

    def dump(self, content_type: str | None, value: Any, stream: IO[bytes]) -> None:
        """Encode *value* onto *stream*."""
        stream.write(self.encode(content_type, value))

    # -- async --

    async def decode_async(
        self,
        content_type: str | None,
        data: bytes,
        target: Any = Any,
        *,
        offload_threshold: int,
    ) -> Any:
        """Like ``decode()``, but bodies of *offload_threshold* bytes or more
        are parsed in a worker thread so the event loop keeps serving.
        """
        codec = self.get(content_type)
        if len(data) < offload_threshold:
            return structure(codec.loads(data), target)
        return await _run_sync(lambda: structure(codec.loads(data), target))


def _run_sync(func: Callable[[], Any]) -> Any:
    """Run a blocking call in an anyio worker thread."""
    return anyio.to_thread.run_sync(func)


def default_registry() -> CodecRegistry:
    """A fresh registry holding the built-in JSON, MessagePack, and BSON codecs."""
    return CodecRegistry([JSONCodec(), MsgPackCodec(), BSONCodec()])
