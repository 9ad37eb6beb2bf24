"""Invoke helpers — call sync or async handlers uniformly.

Waypost handlers can be ``def`` or ``async def``. Any code that calls a
user-provided handler goes through :func:`invoke`, so the sync/async
check lives in exactly one place.

Usage::

    from waypost._internal.invoke import invoke

    result = await invoke(handler, request, response)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any) -> Any:
    """Call *func* and await the result until it is no longer awaitable.

    Works with both sync and async callables::

        # sync middleware hands its continuation back to the runner
        def auth(request, response, proceed):
            if request.headers.get("authorization"):
                return proceed()

        # async middleware awaits it directly
        async def timing(request, response, proceed):
            start = time.monotonic()
            await proceed()
            log.info("took %.3fs", time.monotonic() - start)

    An async handler that *returns* ``proceed()`` instead of awaiting it
    still runs the rest of the chain: nested awaitables are resolved too.
    """
    result = func(*args)
    while inspect.isawaitable(result):
        result = await result
    return result
