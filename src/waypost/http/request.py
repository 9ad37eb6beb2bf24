"""HTTP request as seen by route handlers.

Unlike the response, most of the request is fixed once it arrives. Two
fields are meant to be written: ``params`` (replaced by the router on
every match) and ``state`` (free space for middleware, e.g. the
authenticated user for the handlers further down the chain).
"""

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, quote

from waypost._internal.asgi import Receive, Scope
from waypost.http.headers import Headers

# Characters left unescaped when rebuilding a path from the decoded scope["path"]
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(slots=True)
class Request:
    """An incoming HTTP request.

    ``path`` is the raw, still percent-encoded request path; route
    parameters are decoded by the router when it binds them.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query_string: str = ""
    params: dict[str, str | None] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    client: tuple[str, int] | None = None

    _receive: Receive = field(default=_empty_receive, repr=False)
    _body: bytes | None = field(default=None, repr=False)

    # -- Query string --

    @property
    def query(self) -> dict[str, list[str]]:
        """Parsed query string: name -> all values, blanks kept."""
        return parse_qs(self.query_string, keep_blank_values=True)

    def query_param(self, key: str, default: str | None = None) -> str | None:
        """First value for *key* in the query string, or *default*."""
        values = self.query.get(key)
        return values[0] if values else default

    # -- Raw body access --

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield the body in the chunks the server delivers."""
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full body. Cached after the first call."""
        if self._body is None:
            self._body = b"".join([chunk async for chunk in self.stream()])
        return self._body

    async def text(self, encoding: str = "utf-8") -> str:
        return (await self.body()).decode(encoding)

    async def json(self) -> Any:
        return json_module.loads(await self.body())

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> "Request":
        """Create a Request from an ASGI HTTP scope and receive callable.

        Uses ``raw_path`` when the server provides it, so encoded
        characters such as ``%2F`` reach the router intact.
        """
        raw_path = scope.get("raw_path")
        # some servers leave the query string on raw_path
        if raw_path:
            path = raw_path.partition(b"?")[0].decode("latin-1")
        else:
            path = quote(scope["path"], safe=_PATH_SAFE)
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=path,
            headers=Headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
