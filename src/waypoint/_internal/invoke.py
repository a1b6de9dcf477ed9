"""Invoke helpers — call sync or async callables uniformly.

Processors, mappers, and continuations can be ``def`` or ``async def``
(or return any awaitable). Every call site that runs user code goes
through this helper so the sync/async check lives in exactly one place.

Usage::

    from waypoint._internal.invoke import invoke

    result = await invoke(processor, input, context, ext)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
