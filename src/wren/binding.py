"""Handler binding — validate a handler's shape once, at registration.

Handlers come in two shapes:

- ``ContextHandler``: ``handler(ctx) -> ResponseEnvelope`` for GET
- ``BodyHandler``: ``handler(ctx, body) -> ResponseEnvelope`` for POST,
  PUT, PATCH and DELETE, where ``body`` is a fresh instance of a
  dataclass deserialized from the request payload

The shape can be chosen explicitly by wrapping the callable, or derived
from a plain function's annotations::

    def show(ctx: RequestContext) -> ResponseEnvelope: ...
    def create(ctx: RequestContext, order: Order) -> ResponseEnvelope: ...

    bind_handler("GET", show)           # ContextHandler
    bind_handler("POST", create)        # BodyHandler(body_type=Order)
    bind_handler("POST", BodyHandler(create_any, Order))

Every mismatch raises ``HandlerSignatureError`` here, so a bad handler
stops startup instead of failing a request.
"""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from wren.context import RequestContext
from wren.errors import ConfigurationError, HandlerSignatureError
from wren.http.response import ResponseEnvelope

BODYABLE_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})
SUPPORTED_METHODS: frozenset[str] = BODYABLE_METHODS | {"GET"}

type EnvelopeResult = ResponseEnvelope | Awaitable[ResponseEnvelope]


def is_bodyable(method: str) -> bool:
    """True for methods whose handlers take a request body."""
    return method.upper() in BODYABLE_METHODS


@dataclass(frozen=True, slots=True)
class ContextHandler:
    """A handler that takes only the request context."""

    func: Callable[[RequestContext], EnvelopeResult]

    @property
    def body_type(self) -> None:
        return None

    @property
    def name(self) -> str:
        return _callable_name(self.func)

    def __call__(self, ctx: RequestContext) -> EnvelopeResult:
        return self.func(ctx)


@dataclass(frozen=True, slots=True)
class BodyHandler:
    """A handler that takes the request context and a deserialized body."""

    func: Callable[[RequestContext, Any], EnvelopeResult]
    body_type: type

    @property
    def name(self) -> str:
        return _callable_name(self.func)

    def __call__(self, ctx: RequestContext, body: Any) -> EnvelopeResult:
        return self.func(ctx, body)


type BoundHandler = ContextHandler | BodyHandler


def _callable_name(func: Any) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def _fail(method: str, func: Any, problem: str) -> HandlerSignatureError:
    return HandlerSignatureError(f"Handler {_callable_name(func)!r} for {method}: {problem}")


def check_method(method: str) -> str:
    """Normalize *method*; raise ``ConfigurationError`` if unsupported."""
    normalized = method.upper()
    if normalized not in SUPPORTED_METHODS:
        allowed = ", ".join(sorted(SUPPORTED_METHODS))
        msg = f"Unsupported HTTP method {method!r}. Supported: {allowed}"
        raise ConfigurationError(msg)
    return normalized


def check_body_type(method: str, func: Any, body_type: Any) -> type:
    """Body types must be concrete dataclass classes."""
    if not (isinstance(body_type, type) and dataclasses.is_dataclass(body_type)):
        raise _fail(
            method,
            func,
            f"body parameter type must be a dataclass class, got {body_type!r}",
        )
    return body_type


def _validate_variant(method: str, handler: BoundHandler) -> BoundHandler:
    if handler.func is None or not callable(handler.func):
        raise _fail(method, handler.func, "handler must be callable")
    if isinstance(handler, BodyHandler):
        if not is_bodyable(method):
            raise _fail(method, handler.func, "must take only the request context (1 parameter)")
        check_body_type(method, handler.func, handler.body_type)
    elif is_bodyable(method):
        raise _fail(method, handler.func, "must take the request context and a body (2 parameters)")
    return handler


def _is_envelope_annotation(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, ResponseEnvelope)


def bind_handler(
    method: str,
    handler: Callable[..., Any] | BoundHandler | None,
    *,
    body_type: type | None = None,
) -> BoundHandler:
    """Validate *handler* for *method* and return its bound variant.

    Plain callables are inspected once: one or two positional parameters,
    the first annotated ``RequestContext``, the second (if any) annotated
    with a dataclass (or given via *body_type*), and the return annotated
    ``ResponseEnvelope`` or a subclass. Bodyable methods need two
    parameters, GET needs one.

    Raises ``HandlerSignatureError`` (a ``ConfigurationError``) on any
    mismatch.
    """
    method = check_method(method)

    if handler is None:
        raise _fail(method, handler, "handler must not be None")

    if body_type is not None and not is_bodyable(method):
        raise _fail(method, handler, f"body_type {body_type!r} given but {method} takes no body")

    if isinstance(handler, (ContextHandler, BodyHandler)):
        return _validate_variant(method, handler)

    if not callable(handler):
        raise _fail(method, handler, "handler must be callable")

    try:
        sig = inspect.signature(handler, eval_str=True)
    except (NameError, TypeError, ValueError) as exc:
        raise _fail(method, handler, f"cannot read signature ({exc})") from exc

    params = [
        p
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    extra = [
        p
        for p in sig.parameters.values()
        if p.kind not in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if extra or len(params) not in (1, 2):
        count = len(sig.parameters)
        raise _fail(method, handler, f"must have 1 or 2 positional parameters but had {count}")

    if is_bodyable(method) and len(params) == 1:
        raise _fail(method, handler, "must have 2 parameters (request context and body)")
    if not is_bodyable(method) and len(params) == 2:
        raise _fail(method, handler, "must have 1 parameter (request context)")

    first = params[0].annotation
    if first is not RequestContext:
        raise _fail(
            method,
            handler,
            f"parameter 1 must be annotated RequestContext but was {_describe(first)}",
        )

    if not _is_envelope_annotation(sig.return_annotation):
        raise _fail(
            method,
            handler,
            f"return type must be ResponseEnvelope but was {_describe(sig.return_annotation)}",
        )

    if len(params) == 1:
        return ContextHandler(handler)

    declared = params[1].annotation
    if declared is inspect.Parameter.empty:
        declared = body_type
    elif body_type is not None and body_type is not declared:
        raise _fail(
            method,
            handler,
            f"body_type {body_type!r} disagrees with annotation {declared!r}",
        )
    if declared is None:
        raise _fail(method, handler, "parameter 2 needs a dataclass annotation or body_type")
    return BodyHandler(handler, check_body_type(method, handler, declared))


def _describe(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty or annotation is inspect.Signature.empty:
        return "missing"
    return getattr(annotation, "__qualname__", None) or repr(annotation)
