"""Shared type aliases used across wren modules."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.sink import ResponseSink

# Pre/post filter: returns False to stop the chain
Filter: TypeAlias = Callable[["ResponseSink", "Request"], "bool | Awaitable[bool]"]

# Body deserializer: raw bytes plus target type to a fresh instance
Deserializer: TypeAlias = Callable[[bytes, type], Any]

# Route handler: validated into a ContextHandler or BodyHandler at registration
Handler: TypeAlias = Callable[..., Any]
