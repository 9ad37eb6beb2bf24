"""Handler chain execution with explicit continuation.

A chain is an ordered, non-empty tuple of handlers. The last handler is
called as ``handler(request, response)``; every other handler is called
as ``handler(request, response, proceed)`` and decides whether the rest
of the chain runs by calling ``proceed``::

    async def require_token(request, response, proceed):
        if request.headers.get("authorization") != "Bearer s3cr3t":
            response.set_status(401)
            await response.end()
            return  # chain halts here
        await proceed()

    def show_user(request, response):
        ...

Sync handlers cannot ``await``. They either hand the continuation back
with ``return proceed()`` or just call ``proceed()``; in the latter case
the rest of the chain runs once the handler returns.
"""

import inspect
import logging
from collections.abc import Coroutine
from typing import Any

from waypost._internal.invoke import invoke
from waypost._internal.types import Handler

logger = logging.getLogger("waypost.routing")


async def _already_proceeded() -> None:
    return None


class Proceed:
    """Continuation that runs the handler at ``index`` of ``chain``.

    Only the first call has an effect. Later calls return an awaitable
    that does nothing, so a middleware that proceeds twice cannot run
    the downstream handlers twice.
    """

    __slots__ = ("_chain", "_index", "_pending", "_request", "_response", "called")

    def __init__(self, chain: tuple[Handler, ...], index: int, request: Any, response: Any) -> None:
        self._chain = chain
        self._index = index
        self._request = request
        self._response = response
        self._pending: Coroutine[Any, Any, None] | None = None
        self.called = False

    def __call__(self) -> Coroutine[Any, Any, None]:
        if self.called:
            logger.debug(
                "proceed() called more than once for handler %d of %d; ignoring",
                self._index - 1,
                len(self._chain),
            )
            return _already_proceeded()
        self.called = True
        self._pending = _run_from(self._chain, self._index, self._request, self._response)
        return self._pending

    def __repr__(self) -> str:
        return f"<Proceed {self._index}/{len(self._chain)} called={self.called}>"

    async def settle(self) -> None:
        """Run the rest of the chain if ``proceed()`` was called but never awaited."""
        pending = self._pending
        if pending is not None and inspect.getcoroutinestate(pending) == inspect.CORO_CREATED:
            await pending


async def _run_from(chain: tuple[Handler, ...], index: int, request: Any, response: Any) -> None:
    handler = chain[index]
    if index == len(chain) - 1:
        await invoke(handler, request, response)
        return
    proceed = Proceed(chain, index + 1, request, response)
    await invoke(handler, request, response, proceed)
    await proceed.settle()


async def run_chain(chain: tuple[Handler, ...], request: Any, response: Any) -> None:
    """Run *chain* from its first handler.

    Exceptions raised by handlers propagate unchanged.
    """
    if not chain:
        msg = "Handler chain must not be empty."
        raise ValueError(msg)
    await _run_from(chain, 0, request, response)
