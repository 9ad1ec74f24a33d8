"""Dispatcher — the per-request state machine.

One pass, in order, ending at the first step that cannot continue::

    ROUTE_LOOKUP  miss       -> status 404, NOT_FOUND
    PRE_FILTERS   any False  -> REJECTED (the core writes nothing)
    BIND          BindError  -> UNANSWERED (nothing is written)
    INVOKE        handler    -> ResponseEnvelope
    WRITE         envelope.write(sink)
    POST_FILTERS  a False only skips the remaining post filters
                             -> WRITTEN

Nothing is retried and there is no catch-all: an exception raised by a
filter or handler propagates to the host server.

``UNANSWERED`` is a known gap carried over on purpose: a body that cannot
be read or decoded gets no response from the core, and the ASGI adapter
sends nothing for it.
"""

from __future__ import annotations

import logging
from enum import Enum

from wren._internal.invoke import invoke
from wren.binder import bind_body, extract_path_variables
from wren.binding import BodyHandler
from wren.codecs import Deserializers
from wren.config import WrenConfig
from wren.context import RequestContext
from wren.errors import BindError, ConfigurationError, RouteNotFound
from wren.filters import FilterChain
from wren.http.request import Request
from wren.http.response import ResponseEnvelope
from wren.http.sink import ResponseSink
from wren.routing.router import Router


class DispatchOutcome(Enum):
    """Where a request's pass through the dispatcher ended."""

    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    UNANSWERED = "unanswered"
    WRITTEN = "written"


def default_logger(config: WrenConfig) -> logging.Logger:
    """The package logger; silent unless the host configures logging."""
    logger = logging.getLogger(config.logger_name)
    if config.debug:
        logger.setLevel(logging.DEBUG)
    return logger


class Dispatcher:
    """Routes one request through lookup, filters, binding, and the handler.

    Holds only frozen state, so a single instance serves concurrent
    requests without locking.
    """

    __slots__ = ("_config", "_deserializers", "_filters", "_logger", "_router")

    def __init__(
        self,
        router: Router,
        filters: FilterChain | None = None,
        *,
        config: WrenConfig | None = None,
        logger: logging.Logger | None = None,
        deserializers: Deserializers | None = None,
    ) -> None:
        if router is None:
            msg = "Dispatcher needs a router."
            raise ConfigurationError(msg)
        if not router.compiled:
            msg = "Router must be compiled before dispatching."
            raise ConfigurationError(msg)
        self._router = router
        self._filters = filters or FilterChain()
        self._config = config or WrenConfig()
        self._logger = logger or default_logger(self._config)
        self._deserializers = deserializers or Deserializers.default(
            self._config.xml_content_type
        )

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    async def handle(self, request: Request, sink: ResponseSink) -> DispatchOutcome:
        """Process *request*, writing the response to *sink*."""
        try:
            entry = self._router.lookup(request.method, request.path)
        except RouteNotFound as exc:
            self._logger.debug("[Dispatcher.handle] %s", exc.detail)
            sink.status = exc.status
            return DispatchOutcome.NOT_FOUND

        self._logger.debug(
            "[Dispatcher.handle] %s %s -> %s", request.method, request.path, entry.template
        )

        if not await self._filters.run_pre(sink, request):
            return DispatchOutcome.REJECTED

        ctx = RequestContext(
            sink=sink,
            request=request,
            path_variables=extract_path_variables(entry.pattern, request.path),
        )

        handler = entry.handler
        if isinstance(handler, BodyHandler):
            try:
                body = await bind_body(
                    request,
                    handler.body_type,
                    self._deserializers,
                    max_length=self._config.max_content_length,
                )
            except BindError as exc:
                self._logger.debug("[Dispatcher.handle] bind failed: %s", exc)
                return DispatchOutcome.UNANSWERED
            envelope = await invoke(handler, ctx, body)
        else:
            envelope = await invoke(handler, ctx)

        await self._write(envelope, sink, handler.name)

        await self._filters.run_post(sink, request)
        return DispatchOutcome.WRITTEN

    async def _write(self, envelope: ResponseEnvelope, sink: ResponseSink, name: str) -> None:
        if not isinstance(envelope, ResponseEnvelope):
            self._logger.warning(
                "[Dispatcher.handle] handler %s returned %s, not a ResponseEnvelope; nothing written",
                name,
                type(envelope).__name__,
            )
            return
        await envelope.write(sink, self._logger, chunk_size=self._config.stream_chunk_size)
