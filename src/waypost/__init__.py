"""Waypost — a small HTTP request router with middleware chains.

Patterns are matched in registration order; each route carries one
handler chain per HTTP method::

    from waypost import App

    app = App()

    async def require_token(request, response, proceed):
        if request.headers.get("authorization") is None:
            await response.set_status(401).end()
            return
        await proceed()

    async def show_user(request, response):
        await response.json({"id": request.params["id"]})

    app.route("/users/:id").get(require_token, show_user)

The router can also be used on its own behind any transport that
supplies request/response objects::

    from waypost import Router

    router = Router()
    router.route("/health").get(health)
    await router.handle_request(request, response)
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "InvalidArgument",
    "Method",
    "PreconditionFailed",
    "Proceed",
    "Request",
    "Response",
    "ResponseAlreadySent",
    "Router",
    "RouterConfig",
    "WaypostError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import waypost`` fast for code that only needs the router.
    """
    if name == "App":
        from waypost.app import App

        return App

    if name in ("AppConfig", "RouterConfig"):
        from waypost import config

        return getattr(config, name)

    if name == "Router":
        from waypost.routing.router import Router

        return Router

    if name == "Method":
        from waypost.routing.route import Method

        return Method

    if name == "Proceed":
        from waypost.routing.chain import Proceed

        return Proceed

    if name == "Request":
        from waypost.http.request import Request

        return Request

    if name == "Response":
        from waypost.http.response import Response

        return Response

    if name in ("InvalidArgument", "PreconditionFailed", "ResponseAlreadySent", "WaypostError"):
        from waypost import errors

        return getattr(errors, name)

    msg = f"module 'waypost' has no attribute {name!r}"
    raise AttributeError(msg)
