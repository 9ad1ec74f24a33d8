"""Response sink — where envelopes and filters write the response.

The sink is the core's only view of the outgoing response: a status code,
a header block, and a body writer. Status and headers may change until
the first body write commits them.

``ASGIResponseSink`` is the production implementation; it streams the body
as ASGI ``http.response.body`` messages with ``more_body=True`` and sends
the closing empty message from ``close()``.
"""

from typing import Protocol, runtime_checkable

from wren._internal.asgi import Send
from wren.http.headers import MutableHeaders


@runtime_checkable
class ResponseSink(Protocol):
    """What the dispatcher, filters, and envelopes need from a response."""

    status: int
    headers: MutableHeaders

    @property
    def started(self) -> bool:
        """True once status and headers have been sent."""
        ...

    async def write(self, data: bytes) -> None: ...


class ASGIResponseSink:
    """Response sink over an ASGI ``send`` callable.

    Changes to ``status`` or ``headers`` after the first ``write()`` are
    not sent; the header block is already on the wire.
    """

    __slots__ = ("_closed", "_send", "_started", "headers", "status")

    def __init__(self, send: Send, status: int = 200) -> None:
        self._send = send
        self._started = False
        self._closed = False
        self.status = status
        self.headers = MutableHeaders()

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    async def _start(self) -> None:
        self._started = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": self.headers.raw(),
            }
        )

    async def write(self, data: bytes) -> None:
        """Send *data* as a body chunk, committing status and headers first."""
        if self._closed:
            msg = "Cannot write to a closed response."
            raise RuntimeError(msg)
        if not self._started:
            await self._start()
        if data:
            await self._send({"type": "http.response.body", "body": data, "more_body": True})

    async def close(self) -> None:
        """Finish the response. Safe to call more than once."""
        if self._closed:
            return
        if not self._started:
            await self._start()
        self._closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})
