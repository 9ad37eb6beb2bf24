"""Route entries, match results, and the supported HTTP methods."""

from dataclasses import dataclass, field
from enum import StrEnum

from waypost._internal.types import Handler
from waypost.errors import InvalidArgument
from waypost.routing.pattern import CompiledPattern


class Method(StrEnum):
    """HTTP methods a route can register handlers for."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, name: "Method | str") -> "Method":
        """Resolve *name* (case-insensitive) to a ``Method``.

        Raises ``InvalidArgument`` for anything outside the supported set.
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            try:
                return cls(name.upper())
            except ValueError:
                pass
        allowed = ", ".join(cls)
        msg = f"Unsupported HTTP method {name!r}. Expected one of: {allowed}"
        raise InvalidArgument(msg)

    @classmethod
    def lookup(cls, name: str) -> "Method | None":
        """Like :meth:`parse` but for request-time use: ``None`` if unknown."""
        try:
            return cls(name.upper())
        except (ValueError, AttributeError):
            return None


@dataclass(slots=True)
class RouteEntry:
    """One registered path pattern and its per-method handler chains.

    ``handlers`` only grows: a method key, once set, keeps its chain.
    """

    pattern: str
    matcher: CompiledPattern
    param_names: tuple[str, ...]
    handlers: dict[Method, tuple[Handler, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.param_names) != self.matcher.regex.groups:
            msg = (
                f"Route {self.pattern!r} has {len(self.param_names)} parameter names "
                f"but {self.matcher.regex.groups} capture groups"
            )
            raise InvalidArgument(msg)

    @property
    def methods(self) -> frozenset[Method]:
        return frozenset(self.handlers)

    def chain_for(self, method: Method) -> tuple[Handler, ...] | None:
        return self.handlers.get(method)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route lookup."""

    route: RouteEntry
    params: dict[str, str | None]
    chain: tuple[Handler, ...]
