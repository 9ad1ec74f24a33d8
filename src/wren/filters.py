"""Pre/post filter chain around handler invocation.

A filter is any callable matching::

    def my_filter(sink: ResponseSink, request: Request) -> bool: ...
    async def my_filter(sink: ResponseSink, request: Request) -> bool: ...

Returning ``False`` stops the chain. A pre filter that stops the chain
also stops the handler and every post filter; if it wants the client to
see something it writes that to the sink itself before returning. A post
filter that stops the chain only skips the post filters after it.
Nothing a filter wrote is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wren._internal.invoke import invoke
from wren._internal.types import Filter
from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.sink import ResponseSink

logger = logging.getLogger("wren.filters")


async def run_filters(
    filters: tuple[Filter, ...], sink: ResponseSink, request: Request
) -> bool:
    """Run *filters* in order; return False at the first that returns False."""
    for flt in filters:
        if not await invoke(flt, sink, request):
            logger.debug(
                "Filter %s stopped %s %s",
                getattr(flt, "__qualname__", repr(flt)),
                request.method,
                request.path,
            )
            return False
    return True


@dataclass(frozen=True, slots=True)
class FilterChain:
    """Frozen pre and post filter sequences."""

    pre: tuple[Filter, ...] = ()
    post: tuple[Filter, ...] = ()

    async def run_pre(self, sink: ResponseSink, request: Request) -> bool:
        return await run_filters(self.pre, sink, request)

    async def run_post(self, sink: ResponseSink, request: Request) -> bool:
        return await run_filters(self.post, sink, request)


class Filters:
    """Builder for a ``FilterChain``. Calls chain::

        chain = Filters().add_pre_filter(auth).add_post_filter(audit).build()
    """

    __slots__ = ("_post", "_pre")

    def __init__(self) -> None:
        self._pre: list[Filter] = []
        self._post: list[Filter] = []

    def add_pre_filter(self, flt: Filter) -> Filters:
        """Append a filter that runs before the handler."""
        if flt is None or not callable(flt):
            msg = f"Pre filter must be callable, got {flt!r}"
            raise ConfigurationError(msg)
        self._pre.append(flt)
        return self

    def add_post_filter(self, flt: Filter) -> Filters:
        """Append a filter that runs after the response is written."""
        if flt is None or not callable(flt):
            msg = f"Post filter must be callable, got {flt!r}"
            raise ConfigurationError(msg)
        self._post.append(flt)
        return self

    def build(self) -> FilterChain:
        return FilterChain(pre=tuple(self._pre), post=tuple(self._post))
