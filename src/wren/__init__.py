"""Wren — a small HTTP routing and dispatch core for ASGI servers.

Matches method + path against registered templates, extracts path
variables, binds typed request bodies, runs pre/post filters around the
handler, and writes a response envelope.

Basic usage::

    from wren import RequestContext, ResponseEnvelope, Wren, text_response

    app = Wren()

    @app.get("/hello/{name}")
    def hello(ctx: RequestContext) -> ResponseEnvelope:
        return text_response(200, f"Hello, {ctx.path_variables['name']}!")

    # uvicorn module:app
"""

import logging

# Library logging stays silent unless the host configures it
logging.getLogger("wren").addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "BindError",
    "BodyHandler",
    "ConfigurationError",
    "ContextHandler",
    "DispatchOutcome",
    "Dispatcher",
    "ErrorBody",
    "FileResponse",
    "FilterChain",
    "Filters",
    "HTTPError",
    "HandlerSignatureError",
    "InvalidPathError",
    "JSONResponse",
    "NoContentResponse",
    "Request",
    "RequestContext",
    "ResponseEnvelope",
    "ResponseSink",
    "RouteNotFound",
    "SerializationError",
    "TextResponse",
    "Wren",
    "WrenConfig",
    "WrenError",
    "XMLResponse",
    "file_response",
    "json_error_response",
    "json_response",
    "no_content_response",
    "text_response",
    "xml_error_response",
    "xml_response",
]

_RESPONSE_NAMES = frozenset(
    {
        "ErrorBody",
        "FileResponse",
        "JSONResponse",
        "NoContentResponse",
        "ResponseEnvelope",
        "TextResponse",
        "XMLResponse",
        "file_response",
        "json_error_response",
        "json_response",
        "no_content_response",
        "text_response",
        "xml_error_response",
        "xml_response",
    }
)

_ERROR_NAMES = frozenset(
    {
        "BindError",
        "ConfigurationError",
        "HTTPError",
        "HandlerSignatureError",
        "InvalidPathError",
        "RouteNotFound",
        "SerializationError",
        "WrenError",
    }
)


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import wren`` fast while providing a flat top-level API.
    """
    if name == "Wren":
        from wren.app import Wren

        return Wren

    if name == "WrenConfig":
        from wren.config import WrenConfig

        return WrenConfig

    if name in ("Dispatcher", "DispatchOutcome"):
        from wren import dispatcher as _dispatch

        return getattr(_dispatch, name)

    if name in ("ContextHandler", "BodyHandler"):
        from wren import binding as _binding

        return getattr(_binding, name)

    if name in ("FilterChain", "Filters"):
        from wren import filters as _filters

        return getattr(_filters, name)

    if name == "RequestContext":
        from wren.context import RequestContext

        return RequestContext

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "ResponseSink":
        from wren.http.sink import ResponseSink

        return ResponseSink

    if name in _RESPONSE_NAMES:
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in _ERROR_NAMES:
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
