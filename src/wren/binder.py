"""Request binding — path variables and typed request bodies.

Path variables are always extracted. The body is read and decoded only
when the matched handler takes one. Decoder selection goes through
``Deserializers``: ``application/xml`` (exactly) decodes as XML, any
other or missing content type as JSON.
"""

from __future__ import annotations

import logging

from wren.codecs import Deserializers
from wren.errors import BindError
from wren.http.request import Request
from wren.routing.pattern import RoutePattern

logger = logging.getLogger("wren.binder")


def extract_path_variables(pattern: RoutePattern, path: str) -> dict[str, str]:
    """Map each variable of *pattern* to its segment in *path*.

    Only valid for a path that *pattern* already matched.
    """
    return pattern.extract(path)


async def bind_body[T](
    request: Request,
    body_type: type[T],
    deserializers: Deserializers,
    *,
    max_length: int | None = None,
) -> T:
    """Read the request body and decode it into a fresh *body_type*.

    Raises ``BindError`` if the body cannot be read, is larger than
    *max_length*, or does not decode into *body_type*. Whatever a decoder
    raises is wrapped, so custom formats fail the same way as JSON and XML.
    """
    try:
        raw = await request.body(max_length=max_length)
    except (ConnectionError, ValueError) as exc:
        msg = f"Cannot read request body: {exc}"
        raise BindError(msg, exc) from exc

    logger.debug("Binding %d body bytes to %s", len(raw), body_type.__name__)
    decode = deserializers.select(request.content_type)
    try:
        value = decode(raw, body_type)
    except BindError:
        raise
    except Exception as exc:
        msg = f"Cannot decode request body as {body_type.__name__}: {exc}"
        raise BindError(msg, exc) from exc
    if not isinstance(value, body_type):
        msg = f"Decoder {decode!r} returned {type(value).__name__}, not {body_type.__name__}"
        raise BindError(msg)
    return value
