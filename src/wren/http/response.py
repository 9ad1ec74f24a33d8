"""Response envelopes — complete responses that know how to write themselves.

A handler returns one envelope; the dispatcher writes it to the sink
exactly once. Every variant follows the same order: set the status, set
``Content-Type``, apply custom headers, then emit the body.

Marshal and stream-copy failures are logged at DEBUG on the logger the
dispatcher passes in and are not raised. By then the status and headers
are already on the sink, so the client may see them with an empty or
truncated body.

Construct envelopes through the factory functions at the bottom of this
module::

    return json_response(201, order, {"Location": f"/orders/{order.id}"})
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, BinaryIO, ClassVar

import anyio.to_thread

from wren.codecs import to_json, to_xml
from wren.errors import SerializationError
from wren.http.request import Request
from wren.http.sink import ResponseSink

DEFAULT_CHUNK_SIZE = 64 * 1024

type ByteStream = BinaryIO | AsyncIterable[bytes] | Iterable[bytes]


def _apply_headers(sink: ResponseSink, headers: tuple[tuple[str, str], ...]) -> None:
    for name, value in headers:
        sink.headers.set(name, value)


class ResponseEnvelope(ABC):
    """Base class for everything a handler may return."""

    __slots__ = ()

    status: int

    @abstractmethod
    async def write(
        self,
        sink: ResponseSink,
        logger: logging.Logger,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Write status, headers, and body to *sink*."""


@dataclass(frozen=True, slots=True)
class MarshaledResponse(ResponseEnvelope):
    """An object graph marshaled into the body by a format-specific encoder."""

    body: Any
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()

    content_type: ClassVar[str] = "application/octet-stream"

    def marshal(self) -> bytes:
        raise NotImplementedError

    def with_header(self, name: str, value: str) -> MarshaledResponse:
        """Return a new envelope with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> MarshaledResponse:
        """Return a new envelope with additional headers."""
        return replace(self, headers=(*self.headers, *headers.items()))

    async def write(
        self,
        sink: ResponseSink,
        logger: logging.Logger,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        sink.status = self.status
        sink.headers.set("Content-Type", self.content_type)
        _apply_headers(sink, self.headers)

        try:
            payload = self.marshal()
        except SerializationError as exc:
            logger.debug("[%s.write] marshal failed: %s", type(self).__name__, exc)
            return

        try:
            await sink.write(payload)
        except OSError as exc:
            logger.debug("[%s.write] sink write failed: %s", type(self).__name__, exc)


@dataclass(frozen=True, slots=True)
class JSONResponse(MarshaledResponse):
    """``application/json`` body."""

    content_type: ClassVar[str] = "application/json"

    def marshal(self) -> bytes:
        return to_json(self.body)


@dataclass(frozen=True, slots=True)
class XMLResponse(MarshaledResponse):
    """``application/xml`` body."""

    content_type: ClassVar[str] = "application/xml"

    def marshal(self) -> bytes:
        return to_xml(self.body)


@dataclass(frozen=True, slots=True)
class TextResponse(ResponseEnvelope):
    """A literal UTF-8 string body."""

    body: str
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()

    content_type: ClassVar[str] = "text/plain"

    def with_header(self, name: str, value: str) -> TextResponse:
        """Return a new envelope with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    async def write(
        self,
        sink: ResponseSink,
        logger: logging.Logger,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        sink.status = self.status
        sink.headers.set("Content-Type", self.content_type)
        _apply_headers(sink, self.headers)
        try:
            await sink.write(self.body.encode("utf-8"))
        except OSError as exc:
            logger.debug("[TextResponse.write] sink write failed: %s", exc)


@dataclass(frozen=True, slots=True)
class FileResponse(ResponseEnvelope):
    """A byte stream copied to the body in full.

    *stream* may be a binary file object (read on a worker thread), an
    async iterable of bytes, or a plain iterable of bytes. The envelope
    owns the stream: anything with a ``close()`` is closed after the copy.
    """

    stream: ByteStream
    content_type: str = "application/octet-stream"
    content_disposition: str = "attachment"
    content_length: int = 0
    status: int = 200

    async def write(
        self,
        sink: ResponseSink,
        logger: logging.Logger,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        sink.status = self.status
        sink.headers.set("Content-Type", self.content_type)
        if self.content_length > 0:
            sink.headers.set("Content-Length", str(self.content_length))
        sink.headers.set("Content-Disposition", self.content_disposition)

        try:
            await self._copy(sink, chunk_size)
        except Exception as exc:
            logger.debug("[FileResponse.write] copy failed: %s", exc)
        finally:
            close = getattr(self.stream, "close", None)
            if callable(close):
                close()

    async def _copy(self, sink: ResponseSink, chunk_size: int) -> None:
        stream = self.stream
        if hasattr(stream, "read"):
            while chunk := await anyio.to_thread.run_sync(stream.read, chunk_size):
                await sink.write(chunk)
        elif isinstance(stream, AsyncIterable):
            async for chunk in stream:
                await sink.write(chunk)
        else:
            for chunk in stream:
                await sink.write(chunk)


@dataclass(frozen=True, slots=True)
class NoContentResponse(ResponseEnvelope):
    """204 with no body."""

    status: int = 204

    async def write(
        self,
        sink: ResponseSink,
        logger: logging.Logger,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        sink.status = self.status


@dataclass(frozen=True, slots=True)
class ErrorBody:
    """Body of an error envelope.

    Serialized as ``{"Date", "Message", "Method", "Path"}`` in JSON and as
    ``<ErrorResponse>`` in XML.
    """

    date: str = field(metadata={"name": "Date"})
    message: str = field(metadata={"name": "Message"})
    method: str = field(metadata={"name": "Method"})
    path: str = field(metadata={"name": "Path"})

    xml_root: ClassVar[str] = "ErrorResponse"

    @classmethod
    def for_request(cls, request: Request, message: str) -> ErrorBody:
        """Stamp *message* with the current time and the request line."""
        return cls(
            date=datetime.now().astimezone().isoformat(timespec="seconds"),
            message=message,
            method=request.method,
            path=request.path,
        )


# -- Factories --


def json_response(
    status: int, body: Any, headers: Mapping[str, str] | None = None
) -> JSONResponse:
    """Marshal *body* as JSON."""
    return JSONResponse(body=body, status=status, headers=tuple((headers or {}).items()))


def xml_response(
    status: int, body: Any, headers: Mapping[str, str] | None = None
) -> XMLResponse:
    """Marshal *body* (a dataclass instance or mapping) as XML."""
    return XMLResponse(body=body, status=status, headers=tuple((headers or {}).items()))


def json_error_response(status: int, request: Request, message: str) -> JSONResponse:
    """JSON ``ErrorBody`` for *request*."""
    return JSONResponse(body=ErrorBody.for_request(request, message), status=status)


def xml_error_response(status: int, request: Request, message: str) -> XMLResponse:
    """XML ``ErrorBody`` for *request*."""
    return XMLResponse(body=ErrorBody.for_request(request, message), status=status)


def text_response(
    status: int, body: str, headers: Mapping[str, str] | None = None
) -> TextResponse:
    return TextResponse(body=body, status=status, headers=tuple((headers or {}).items()))


def file_response(
    status: int,
    content_type: str,
    content_disposition: str,
    content_length: int,
    stream: ByteStream,
) -> FileResponse:
    """Stream *stream* as the body. A *content_length* of 0 omits the header."""
    return FileResponse(
        stream=stream,
        content_type=content_type,
        content_disposition=content_disposition,
        content_length=content_length,
        status=status,
    )


def no_content_response() -> NoContentResponse:
    return NoContentResponse()
