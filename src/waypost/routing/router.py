"""Ordered route table with a builder API and the request dispatcher.

Routes are matched by linear scan in registration order. The first route
whose pattern accepts the path *and* which has a chain for the request
method wins; there is no specificity ranking.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from waypost._internal.invoke import invoke
from waypost._internal.types import Handler
from waypost.config import RouterConfig
from waypost.errors import InvalidArgument, PreconditionFailed
from waypost.routing.chain import run_chain
from waypost.routing.params import bind_params
from waypost.routing.pattern import compile_pattern
from waypost.routing.route import Method, RouteEntry, RouteMatch

logger = logging.getLogger("waypost.routing")


def _check_handlers(handlers: tuple[Any, ...]) -> tuple[Handler, ...]:
    if not handlers:
        msg = "At least one handler is required."
        raise InvalidArgument(msg)
    for handler in handlers:
        if not callable(handler):
            msg = f"Handler must be callable, got {type(handler).__name__}."
            raise InvalidArgument(msg)
    return handlers


def request_path(request: Any) -> str:
    """Return the path a request is matched against.

    Prefers ``request.path``. Falls back to the first raw positional
    parameter (``request.params[0]``), as set by transports that mount the
    router behind a catch-all, normalised to start with ``/``.
    """
    path = getattr(request, "path", None)
    if isinstance(path, str) and path:
        return path

    raw = getattr(request, "params", None)
    value: Any = None
    if isinstance(raw, Mapping):
        value = raw.get(0, raw.get("0"))
    elif isinstance(raw, Sequence) and not isinstance(raw, str) and raw:
        value = raw[0]

    if not value:
        return "/"
    value = str(value)
    return value if value.startswith("/") else f"/{value}"


class Router:
    """Route table builder and dispatcher.

    Usage::

        router = Router()
        router.route("/users/:id").get(load_user, show_user).delete(remove_user)
        router.route("/users").post(create_user)
        router.not_found(render_404)

        # later, from the transport
        await router.handle_request(request, response)

    ``route()`` moves a cursor to the new route; the method registration
    calls that follow attach to it.
    """

    __slots__ = ("_cursor", "_not_found", "_routes", "config")

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config = config or RouterConfig()
        self._routes: list[RouteEntry] = []
        self._cursor: int | None = None
        self._not_found: tuple[Handler, ...] | None = None

    def __repr__(self) -> str:
        return f"<Router routes={len(self._routes)} not_found={self._not_found is not None}>"

    @property
    def routes(self) -> tuple[RouteEntry, ...]:
        """Registered routes, in match-priority order."""
        return tuple(self._routes)

    @property
    def not_found_chain(self) -> tuple[Handler, ...] | None:
        return self._not_found

    # -- Registration --

    def route(self, pattern: str) -> "Router":
        """Register a path pattern and make it the current route."""
        if not isinstance(pattern, str) or pattern == "":
            msg = "Route pattern must be a non-empty string."
            raise InvalidArgument(msg)

        matcher = compile_pattern(
            pattern,
            case_sensitive=self.config.case_sensitive,
            strict=self.config.strict,
            end=self.config.end,
        )
        self._routes.append(
            RouteEntry(pattern=pattern, matcher=matcher, param_names=matcher.param_names)
        )
        self._cursor = len(self._routes) - 1
        logger.debug("Registered route %r -> %s", pattern, matcher.regex.pattern)
        return self

    def method(self, name: Method | str, *handlers: Handler) -> "Router":
        """Attach *handlers* as the chain for *name* on the current route.

        A second registration for the same method and route is ignored;
        the first chain stays in place.
        """
        method = Method.parse(name)
        chain = _check_handlers(handlers)
        if self._cursor is None:
            msg = f"Cannot add {method} handler before any route is registered."
            raise PreconditionFailed(msg)

        entry = self._routes[self._cursor]
        if method in entry.handlers:
            if self.config.warn_on_duplicate:
                logger.warning(
                    "Ignoring duplicate %s handler for route %r", method, entry.pattern
                )
            return self

        entry.handlers[method] = chain
        logger.debug("Registered %s %r (%d handler(s))", method, entry.pattern, len(chain))
        return self

    def get(self, *handlers: Handler) -> "Router":
        return self.method(Method.GET, *handlers)

    def post(self, *handlers: Handler) -> "Router":
        return self.method(Method.POST, *handlers)

    def put(self, *handlers: Handler) -> "Router":
        return self.method(Method.PUT, *handlers)

    def delete(self, *handlers: Handler) -> "Router":
        return self.method(Method.DELETE, *handlers)

    def patch(self, *handlers: Handler) -> "Router":
        return self.method(Method.PATCH, *handlers)

    def options(self, *handlers: Handler) -> "Router":
        return self.method(Method.OPTIONS, *handlers)

    def not_found(self, *handlers: Handler) -> None:
        """Set the chain run when no route matches. Only the first call counts."""
        chain = _check_handlers(handlers)
        if self._not_found is not None:
            if self.config.warn_on_duplicate:
                logger.warning("Ignoring duplicate not-found handler registration")
            return
        self._not_found = chain

    # -- Dispatch --

    def match(self, method: Method | str, path: str) -> RouteMatch | None:
        """Find the first route accepting *path* with a chain for *method*.

        Returns ``None`` when nothing matches, including for methods
        outside the supported set.
        """
        verb = method if isinstance(method, Method) else Method.lookup(method)
        if verb is None:
            return None

        for entry in self._routes:
            chain = entry.chain_for(verb)
            if chain is None:
                continue
            captures = entry.matcher.match(path)
            if captures is None:
                continue
            return RouteMatch(
                route=entry,
                params=bind_params(entry.param_names, captures),
                chain=chain,
            )
        return None

    async def handle_request(self, request: Any, response: Any) -> None:
        """Dispatch one request. The single entry point for transports.

        On a match, ``request.params`` is replaced with the decoded path
        parameters and the route's chain runs. Otherwise the not-found
        chain runs if one is set, or the response is ended with a bare 404.
        Handler exceptions propagate to the caller.
        """
        path = request_path(request)
        match = self.match(request.method, path)

        if match is not None:
            request.params = match.params
            await run_chain(match.chain, request, response)
            return

        if self._not_found is not None:
            await run_chain(self._not_found, request, response)
            return

        logger.debug("No route for %s %s", request.method, path)
        await invoke(response.set_status, 404)
        await invoke(response.end)
