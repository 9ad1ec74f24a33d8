"""Invoke helper — call sync or async user callables uniformly.

Handlers and filters can be ``def`` or ``async def``. The sync/async
check lives here and nowhere else::

    from wren._internal.invoke import invoke

    keep_going = await invoke(fn, sink, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
