"""Immutable HTTP request.

Frozen metadata with async body access. The dispatcher and filters see
the same object; path variables live on ``RequestContext``, not here.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive, Scope
from wren.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers) is frozen at creation. The body is
    read asynchronously via ``.body()`` or ``.stream()`` and cached after
    the first full read.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable body cache (the dict is mutable, the field is not)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value, verbatim."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks.

        Raises ``ConnectionError`` if the client disconnects before the
        body is complete.
        """
        if "_body" in self._cache:
            yield self._cache["_body"]
            return
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                msg = "Client disconnected before the request body was complete."
                raise ConnectionError(msg)
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def body(self, max_length: int | None = None) -> bytes:
        """Read the full request body.

        Raises ``ValueError`` when the body grows past *max_length* bytes.
        The ASGI receive is consumed once; later calls return the cache.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if max_length is not None and size > max_length:
                msg = f"Request body exceeds {max_length} bytes."
                raise ValueError(msg)
            chunks.append(chunk)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
