"""HandlerEntry — one registered (method, template, handler) route."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from wren.routing.pattern import RoutePattern

if TYPE_CHECKING:
    from wren.binding import BoundHandler


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    """A frozen route definition.

    Created at registration, after the template and the handler have both
    been validated.
    """

    method: str
    pattern: RoutePattern
    handler: BoundHandler

    @property
    def has_body(self) -> bool:
        """True if the handler takes a deserialized request body."""
        return self.handler.body_type is not None

    @property
    def body_type(self) -> type | None:
        return self.handler.body_type

    @property
    def template(self) -> str:
        return self.pattern.template
