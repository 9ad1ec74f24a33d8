"""In-process test client for wren applications.

Requests go straight into the ASGI callable, no sockets involved, and the
client keeps exactly the messages the app sent back. That makes the
unanswered case visible: when the core drops a request, ``answered`` is
False and nothing else is set.
"""

import json as json_module
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Message, Scope
from wren.http.headers import Headers


@dataclass(frozen=True, slots=True)
class TestResponse:
    """What the application sent for one request.

    ``answered`` is False when the app returned without sending any ASGI
    message; the status is then 0 and the body empty. ``completed`` is
    False when the body was started but never closed.
    """

    __test__ = False

    status: int
    headers: Headers
    body: bytes
    answered: bool = True
    completed: bool = True

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json_module.loads(self.body)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")


@dataclass(slots=True)
class _Transcript:
    """Accumulates the ASGI messages of one response."""

    status: int = 0
    headers: tuple[tuple[bytes, bytes], ...] = ()
    parts: list[bytes] = field(default_factory=list)
    started: bool = False
    completed: bool = False

    async def send(self, message: Message) -> None:
        kind = message["type"]
        if kind == "http.response.start":
            self.started = True
            self.status = message["status"]
            self.headers = tuple(message.get("headers", ()))
        elif kind == "http.response.body":
            self.parts.append(message.get("body", b""))
            self.completed = not message.get("more_body", False)

    def response(self) -> TestResponse:
        return TestResponse(
            status=self.status,
            headers=Headers(self.headers),
            body=b"".join(self.parts),
            answered=self.started,
            completed=self.completed,
        )


def _one_shot_receive(body: bytes):
    delivered = False

    async def receive() -> Message:
        nonlocal delivered
        if delivered:
            return {"type": "http.disconnect"}
        delivered = True
        return {"type": "http.request", "body": body, "more_body": False}

    return receive


def _http_scope(method: str, target: str, headers: dict[str, str]) -> Scope:
    path, _, query = target.partition("?")
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers.items()
        ],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


class TestClient:
    """Async test client for wren applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.post("/orders", json={"item": "tea"})
            assert response.status == 201
    """

    __test__ = False
    __slots__ = ("app",)

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        freeze = getattr(self.app, "freeze", None)
        if callable(freeze):
            freeze()
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        return await self.request("GET", path, headers=headers)

    async def post(self, path: str, **kwargs: Any) -> TestResponse:
        """Send a POST request. Accepts ``headers``, ``body`` and ``json``."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> TestResponse:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> TestResponse:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> TestResponse:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> TestResponse:
        """Run one request through the app and return what it sent.

        ``json`` replaces ``body`` and sets ``Content-Type:
        application/json`` unless *headers* name another type.
        """
        merged: dict[str, str] = {}
        payload = body or b""
        if json is not None:
            payload = json_module.dumps(json).encode("utf-8")
            merged["content-type"] = "application/json"
        merged.update(headers or {})

        transcript = _Transcript()
        scope = _http_scope(method, path, merged)
        await self.app(scope, _one_shot_receive(payload), transcript.send)
        return transcript.response()
