"""The response envelope — one wire shape for every response.

::

    {"status": 200, "error": null, "data": {...}}
    {"status": 404, "error": "Not Found", "data": null}

``error`` is set only on failure paths, ``data`` only on success.
All three keys are always present, whatever the codec.
"""

from dataclasses import dataclass
from typing import Any

from switchboard.serialization.structure import unstructure


@dataclass(frozen=True, slots=True)
class Envelope:
    """A response envelope."""

    status: int
    error: str | None = None
    data: Any = None

    @classmethod
    def success(cls, data: Any = None, status: int = 200) -> "Envelope":
        return cls(status=status, data=data)

    @classmethod
    def failure(cls, status: int, error: str) -> "Envelope":
        return cls(status=status, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_wire(self) -> dict[str, Any]:
        """Plain-data form handed to a codec."""
        return {
            "status": self.status,
            "error": self.error,
            "data": unstructure(self.data),
        }
