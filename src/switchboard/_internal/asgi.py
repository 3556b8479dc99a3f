"""Typed ASGI aliases.

Scope, receive, and send as ASGI 3.0 defines them. Only the
request pipeline and test client touch these directly.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]

# Any ASGI 3.0 application (used for mounted sub-trees)
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]
