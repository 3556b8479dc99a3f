"""Shared type aliases used across switchboard modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Fallback handler: receives the request context only
FallbackHandler: TypeAlias = Callable[..., Any]

# Converts one captured path string to a typed value
Converter: TypeAlias = Callable[[str], Any]
