"""Blobstore — CRUD over named blobs, served under ``/blobstore/``.

Handlers are methods on a ``BlobStore`` object registered with
``add_method``. Bodies and responses use whichever codec the client
names (JSON, MessagePack, or BSON).

Run:
    cd examples/blobstore && uvicorn app:service
"""

import itertools
import threading
from dataclasses import dataclass, field

from switchboard import Context, Service, ServiceConfig, UInt64


@dataclass(frozen=True, slots=True)
class Blob:
    name: str = field(metadata={"alias": "Name"})
    content: str = field(default="", metadata={"alias": "Content"})


@dataclass(frozen=True, slots=True)
class Stored:
    id: int
    name: str
    content: str


class BlobStore:
    """In-memory blob storage. Thread-safe."""

    def __init__(self) -> None:
        self._blobs: dict[int, Stored] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, ctx: Context, blob: Blob) -> None:
        with self._lock:
            stored = Stored(id=next(self._ids), name=blob.name, content=blob.content)
            self._blobs[stored.id] = stored
        ctx.respond(stored, status=201, headers={"Location": service.url_for("blob", id=stored.id)})

    def read(self, ctx: Context, id: UInt64) -> None:
        with self._lock:
            stored = self._blobs.get(id)
        if stored is None:
            ctx.fail(404, f"no blob {id}")
            return
        ctx.respond(stored)

    def update(self, ctx: Context, blob: Blob, id: UInt64) -> None:
        with self._lock:
            if id not in self._blobs:
                ctx.fail(404, f"no blob {id}")
                return
            stored = Stored(id=id, name=blob.name, content=blob.content)
            self._blobs[id] = stored
        ctx.respond(stored)

    def delete(self, ctx: Context, id: UInt64) -> None:
        with self._lock:
            stored = self._blobs.pop(id, None)
        if stored is None:
            ctx.fail(404, f"no blob {id}")
            return
        ctx.respond(stored)


store = BlobStore()
service = Service(ServiceConfig(root="/blobstore/"))

service.add_method("", store, "create", methods="POST", body=Blob)
service.add_method("{id}", store, "read", methods="GET", name="blob")
service.add_method("{id}", store, "update", methods="PUT", body=Blob)
service.add_method("{id}", store, "delete", methods="DELETE")
