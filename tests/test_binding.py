"""Tests for wren.binding — handler shape validation at registration."""

from dataclasses import dataclass

import pytest

from wren.binding import (
    BodyHandler,
    ContextHandler,
    bind_handler,
    check_method,
    is_bodyable,
)
from wren.context import RequestContext
from wren.errors import ConfigurationError, HandlerSignatureError
from wren.http.response import JSONResponse, ResponseEnvelope, text_response


@dataclass
class Order:
    item: str
    quantity: int = 1


class NotADataclass:
    pass


def show(ctx: RequestContext) -> ResponseEnvelope:
    return text_response(200, "show")


def create(ctx: RequestContext, order: Order) -> ResponseEnvelope:
    return text_response(201, order.item)


class TestBodyable:
    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "post"])
    def test_bodyable(self, method: str) -> None:
        assert is_bodyable(method) is True

    def test_get_is_not_bodyable(self) -> None:
        assert is_bodyable("GET") is False

    def test_unsupported_method(self) -> None:
        with pytest.raises(ConfigurationError, match="HEAD"):
            check_method("HEAD")


class TestBindPlainCallables:
    def test_get_context_only(self) -> None:
        bound = bind_handler("GET", show)
        assert isinstance(bound, ContextHandler)
        assert bound.body_type is None

    def test_post_with_body(self) -> None:
        bound = bind_handler("POST", create)
        assert isinstance(bound, BodyHandler)
        assert bound.body_type is Order

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_bodyable_with_one_parameter_fails(self, method: str) -> None:
        with pytest.raises(HandlerSignatureError) as exc_info:
            bind_handler(method, show)
        assert isinstance(exc_info.value, ConfigurationError)
        assert method in str(exc_info.value)
        assert "2 parameters" in str(exc_info.value)

    def test_get_with_two_parameters_fails(self) -> None:
        with pytest.raises(HandlerSignatureError, match="1 parameter"):
            bind_handler("GET", create)

    def test_zero_parameters_fails(self) -> None:
        def nothing() -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="1 or 2"):
            bind_handler("GET", nothing)

    def test_three_parameters_fails(self) -> None:
        def too_many(ctx: RequestContext, order: Order, extra: int) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="1 or 2"):
            bind_handler("POST", too_many)

    def test_var_args_fails(self) -> None:
        def star(*args) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError):
            bind_handler("GET", star)

    def test_first_parameter_must_be_context(self) -> None:
        def wrong(ctx: str) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="RequestContext"):
            bind_handler("GET", wrong)

    def test_first_parameter_missing_annotation(self) -> None:
        def bare(ctx) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="missing"):
            bind_handler("GET", bare)

    def test_body_must_be_dataclass(self) -> None:
        def wrong(ctx: RequestContext, body: NotADataclass) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="dataclass"):
            bind_handler("PUT", wrong)

    def test_body_builtin_rejected(self) -> None:
        def wrong(ctx: RequestContext, body: dict) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="dataclass"):
            bind_handler("PATCH", wrong)

    def test_return_must_be_envelope(self) -> None:
        def wrong(ctx: RequestContext) -> str:
            return "nope"

        with pytest.raises(HandlerSignatureError, match="return type"):
            bind_handler("GET", wrong)

    def test_return_missing_annotation(self) -> None:
        def wrong(ctx: RequestContext):
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="return type"):
            bind_handler("GET", wrong)

    def test_envelope_subclass_return_accepted(self) -> None:
        def specific(ctx: RequestContext) -> JSONResponse:
            return JSONResponse({"ok": True})

        assert isinstance(bind_handler("GET", specific), ContextHandler)

    def test_async_handler(self) -> None:
        async def later(ctx: RequestContext, order: Order) -> ResponseEnvelope:
            return text_response(200, "")

        bound = bind_handler("POST", later)
        assert isinstance(bound, BodyHandler)
        assert bound.body_type is Order

    def test_body_type_for_unannotated_parameter(self) -> None:
        def create_any(ctx: RequestContext, body) -> ResponseEnvelope:
            return text_response(200, "")

        bound = bind_handler("POST", create_any, body_type=Order)
        assert isinstance(bound, BodyHandler)
        assert bound.body_type is Order

    def test_unannotated_body_without_body_type_fails(self) -> None:
        def create_any(ctx: RequestContext, body) -> ResponseEnvelope:
            return text_response(200, "")

        with pytest.raises(HandlerSignatureError, match="body_type"):
            bind_handler("POST", create_any)

    def test_body_type_on_get_fails(self) -> None:
        with pytest.raises(HandlerSignatureError, match="takes no body"):
            bind_handler("GET", show, body_type=Order)

    def test_none_handler(self) -> None:
        with pytest.raises(HandlerSignatureError, match="None"):
            bind_handler("GET", None)

    def test_not_callable(self) -> None:
        with pytest.raises(HandlerSignatureError, match="callable"):
            bind_handler("GET", "show")  # type: ignore[arg-type]


class TestBindExplicitVariants:
    def test_context_handler_for_get(self) -> None:
        bound = ContextHandler(lambda ctx: text_response(200, ""))
        assert bind_handler("GET", bound) is bound

    def test_body_handler_for_post(self) -> None:
        bound = BodyHandler(lambda ctx, body: text_response(200, ""), Order)
        assert bind_handler("POST", bound) is bound

    def test_context_handler_for_post_fails(self) -> None:
        with pytest.raises(HandlerSignatureError, match="2 parameters"):
            bind_handler("POST", ContextHandler(lambda ctx: text_response(200, "")))

    def test_body_handler_for_get_fails(self) -> None:
        with pytest.raises(HandlerSignatureError, match="1 parameter"):
            bind_handler("GET", BodyHandler(lambda ctx, body: text_response(200, ""), Order))

    def test_body_handler_needs_dataclass(self) -> None:
        with pytest.raises(HandlerSignatureError, match="dataclass"):
            bind_handler(
                "POST", BodyHandler(lambda ctx, body: text_response(200, ""), NotADataclass)
            )

    def test_variants_call_through(self) -> None:
        ctx_handler = ContextHandler(show)
        body_handler = BodyHandler(create, Order)

        assert ctx_handler.name == "show"
        assert body_handler.name == "create"
        assert body_handler(None, Order(item="tea")).body == "tea"  # type: ignore[arg-type]
