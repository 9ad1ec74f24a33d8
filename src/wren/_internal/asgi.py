"""Raw ASGI type aliases.

Used by ``wren.app``, ``wren.http.request``, ``wren.http.sink`` and the
test client; handlers and filters only see ``Request`` and ``ResponseSink``.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
