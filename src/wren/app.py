"""Wren application — registration API and ASGI entry point.

Mutable during setup (routes, filters, body formats).
Frozen on the first request, on ASGI lifespan startup, or by ``freeze()``.
"""

import logging
import threading
from collections.abc import Callable

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.types import Deserializer, Filter, Handler
from wren.binding import bind_handler, check_method
from wren.codecs import Deserializers
from wren.config import WrenConfig
from wren.dispatcher import Dispatcher, DispatchOutcome
from wren.filters import Filters
from wren.http.request import Request
from wren.http.sink import ASGIResponseSink
from wren.routing.pattern import compile_path
from wren.routing.route import HandlerEntry
from wren.routing.router import Router


class Wren:
    """The routing and dispatch core, exposed as an ASGI application.

    Registration validates templates and handler shapes immediately and
    raises ``ConfigurationError`` on the first mistake::

        app = Wren()

        @app.get("/orders/{order-id}")
        def show(ctx: RequestContext) -> ResponseEnvelope:
            return json_response(200, find(ctx.path_variables["order-id"]))

        @app.post("/orders")
        async def create(ctx: RequestContext, order: Order) -> ResponseEnvelope:
            return json_response(201, await save(order))

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock and
        a double check so exactly one thread compiles the router, even
        when several workers take their first request at once.
    """

    __slots__ = (
        "_deserializers",
        "_dispatcher",
        "_filters",
        "_freeze_lock",
        "_frozen",
        "_logger",
        "_router",
        "config",
    )

    def __init__(
        self,
        config: WrenConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config: WrenConfig = config or WrenConfig()
        self._logger = logger
        self._router = Router()
        self._filters = Filters()
        self._deserializers = Deserializers.default(self.config.xml_content_type)
        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._dispatcher: Dispatcher | None = None

    # -- Route registration --

    def register(
        self,
        method: str,
        template: str,
        handler: Handler,
        *,
        body_type: type | None = None,
    ) -> HandlerEntry:
        """Register *handler* for *method* and *template*.

        Raises ``InvalidPathError`` or ``HandlerSignatureError`` (both
        ``ConfigurationError``) when the route is misconfigured.
        """
        self._check_not_frozen()
        method = check_method(method)
        pattern = compile_path(template)
        bound = bind_handler(method, handler, body_type=body_type)
        entry = HandlerEntry(method=method, pattern=pattern, handler=bound)
        self._router.add(entry)
        return entry

    def _route(
        self, method: str, template: str, body_type: type | None
    ) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            self.register(method, template, func, body_type=body_type)
            return func

        return decorator

    def get(self, template: str) -> Callable[[Handler], Handler]:
        """Register a GET handler via decorator."""
        return self._route("GET", template, None)

    def post(self, template: str, *, body_type: type | None = None) -> Callable[[Handler], Handler]:
        """Register a POST handler via decorator."""
        return self._route("POST", template, body_type)

    def put(self, template: str, *, body_type: type | None = None) -> Callable[[Handler], Handler]:
        """Register a PUT handler via decorator."""
        return self._route("PUT", template, body_type)

    def patch(
        self, template: str, *, body_type: type | None = None
    ) -> Callable[[Handler], Handler]:
        """Register a PATCH handler via decorator."""
        return self._route("PATCH", template, body_type)

    def delete(
        self, template: str, *, body_type: type | None = None
    ) -> Callable[[Handler], Handler]:
        """Register a DELETE handler via decorator."""
        return self._route("DELETE", template, body_type)

    @property
    def routes(self) -> list[HandlerEntry]:
        """Registered routes in registration order."""
        return self._router.routes

    # -- Filters --

    def add_pre_filter(self, flt: Filter) -> Filter:
        """Add a filter that runs before the handler. Usable as a decorator."""
        self._check_not_frozen()
        self._filters.add_pre_filter(flt)
        return flt

    def add_post_filter(self, flt: Filter) -> Filter:
        """Add a filter that runs after the response is written. Usable as a decorator."""
        self._check_not_frozen()
        self._filters.add_post_filter(flt)
        return flt

    # -- Body formats --

    def deserializer(self, content_type: str) -> Callable[[Deserializer], Deserializer]:
        """Register a request-body decoder for an exact content type.

        The decoder receives the raw body bytes and the handler's body
        type and returns an instance of that type::

            @app.deserializer("application/x-msgpack")
            def from_msgpack(raw: bytes, cls: type) -> object: ...
        """

        def decorator(func: Deserializer) -> Deserializer:
            self._check_not_frozen()
            self._deserializers = self._deserializers.with_format(content_type, func)
            return func

        return decorator

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        self.freeze()
        assert self._dispatcher is not None

        request = Request.from_asgi(scope, receive)
        sink = ASGIResponseSink(send)
        outcome = await self._dispatcher.handle(request, sink)

        if outcome is not DispatchOutcome.UNANSWERED:
            await sink.close()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup so configuration errors stop the server early."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.freeze()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    @property
    def dispatcher(self) -> Dispatcher:
        """The compiled dispatcher. Freezes the app on first access."""
        self.freeze()
        assert self._dispatcher is not None
        return self._dispatcher

    def freeze(self) -> None:
        """Compile routes and filters. Thread-safe; later calls are no-ops."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.compile()
            self._dispatcher = Dispatcher(
                self._router,
                self._filters.build(),
                config=self.config,
                logger=self._logger,
                deserializers=self._deserializers,
            )
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, filters, and body formats before the first request."
            )
            raise RuntimeError(msg)
