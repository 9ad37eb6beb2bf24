"""ASGI application — serves a Router.

The adapter is deliberately thin: it builds a Request and Response per
HTTP scope and awaits ``Router.handle_request``. Everything routing-related
lives in the router; this module only owns the transport concerns the
router leaves to its caller (lifespan hooks, unhandled exceptions, and
responses a chain forgot to end).
"""

import logging

from waypost._internal.asgi import Receive, Scope, Send
from waypost._internal.invoke import invoke
from waypost._internal.types import Handler, Hook
from waypost.config import AppConfig
from waypost.http.request import Request
from waypost.http.response import Response
from waypost.routing.router import Router

logger = logging.getLogger("waypost.server")


class App:
    """The ASGI entry point.

    Usage::

        app = App()
        app.route("/users/:id").get(show_user)
        app.not_found(render_404)

        # uvicorn module:app, hypercorn module:app, ...

    An existing router can be served as-is with ``App(router)``.
    """

    __slots__ = ("_shutdown_hooks", "_startup_hooks", "config", "router")

    def __init__(self, router: Router | None = None, *, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.router = router if router is not None else Router(self.config.router)
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []

    # -- Registration (delegates to the router) --

    def route(self, pattern: str) -> Router:
        """Register *pattern*; chain method calls on the returned router."""
        return self.router.route(pattern)

    def not_found(self, *handlers: Handler) -> None:
        self.router.not_found(*handlers)

    def on_startup(self, hook: Hook) -> Hook:
        """Register a hook to run at ASGI lifespan startup. Usable as a decorator."""
        self._startup_hooks.append(hook)
        return hook

    def on_shutdown(self, hook: Hook) -> Hook:
        """Register a hook to run at ASGI lifespan shutdown. Usable as a decorator."""
        self._shutdown_hooks.append(hook)
        return hook

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            logger.debug("Ignoring unsupported ASGI scope type %r", scope["type"])
            return
        await self._handle_http(scope, receive, send)

    async def _handle_http(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request.from_asgi(scope, receive)
        response = Response(send)

        try:
            await self.router.handle_request(request, response)
        except Exception as exc:
            logger.exception("500 %s %s", request.method, request.path)
            if response.finished:
                return
            response.finished = True
            body = "Internal Server Error"
            if self.config.debug:
                body = f"{body}\n\n{exc!r}"
            fallback = Response(send)
            await fallback.set_status(500).end(body)
            return

        if not response.finished:
            logger.warning(
                "%s %s: handler chain returned without ending the response",
                request.method,
                request.path,
            )
            await response.end()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol, calling hooks in registration order."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                try:
                    for hook in self._shutdown_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("Shutdown hook failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return
