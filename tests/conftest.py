"""Shared fixtures and doubles for wren tests."""

from typing import Any

import pytest

from wren.http.headers import Headers, MutableHeaders
from wren.http.request import Request


class RecordingSink:
    """In-memory ResponseSink that remembers every write."""

    def __init__(self) -> None:
        self.status = 200
        self.headers = MutableHeaders()
        self.chunks: list[bytes] = []
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def write(self, data: bytes) -> None:
        self._started = True
        self.chunks.append(data)

    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)


class FailingSink(RecordingSink):
    """Sink whose body writes fail like a dropped connection."""

    async def write(self, data: bytes) -> None:
        self._started = True
        raise ConnectionResetError("client went away")


def make_receive(*bodies: bytes):
    """Create an ASGI receive callable that yields *bodies* as chunks."""
    messages: list[dict[str, Any]] = []
    for i, body in enumerate(bodies):
        is_last = i == len(bodies) - 1
        messages.append({"type": "http.request", "body": body, "more_body": not is_last})
    if not messages:
        messages.append({"type": "http.request", "body": b"", "more_body": False})
    it = iter(messages)

    async def receive() -> dict[str, Any]:
        return next(it, {"type": "http.disconnect"})

    return receive


def make_request(
    method: str = "GET",
    path: str = "/",
    *,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> Request:
    """Build a Request backed by a one-shot receive."""
    return Request(
        method=method,
        path=path,
        headers=Headers(
            tuple((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items())
        ),
        _receive=make_receive(body),
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
