"""HTTP response writer handed to every handler in a chain.

Handlers share one mutable response per request: middleware can set a
header, the final handler writes the body and ends it. The body is
buffered and sent to the server when ``end()`` is awaited::

    async def show_user(request, response):
        response.set_header("Cache-Control", "no-store")
        await response.json({"id": request.params["id"]})
"""

import json as json_module
from typing import Any

from waypost._internal.asgi import Send
from waypost.errors import ResponseAlreadySent
from waypost.server.sender import send_response

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


class Response:
    """A buffered, single-shot HTTP response bound to an ASGI ``send``.

    Setters return the response so calls can be chained::

        await response.set_status(201).set_header("Location", url).end()
    """

    __slots__ = ("_chunks", "_headers", "_send", "finished", "status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._chunks: list[bytes] = []
        self._headers: list[tuple[str, str]] = []
        self.status = 200
        self.finished = False

    def __repr__(self) -> str:
        return f"<Response {self.status} finished={self.finished}>"

    def _check_open(self) -> None:
        if self.finished:
            msg = "Response has already been sent."
            raise ResponseAlreadySent(msg)

    # -- Status and headers --

    def set_status(self, status: int) -> "Response":
        self._check_open()
        self.status = status
        return self

    def set_header(self, name: str, value: str) -> "Response":
        """Set *name*, replacing any earlier values (case-insensitive)."""
        self._check_open()
        lowered = name.lower()
        self._headers = [(k, v) for k, v in self._headers if k.lower() != lowered]
        self._headers.append((name, value))
        return self

    def add_header(self, name: str, value: str) -> "Response":
        """Append *name* without touching earlier values (e.g. Set-Cookie)."""
        self._check_open()
        self._headers.append((name, value))
        return self

    def get_header(self, name: str) -> str | None:
        lowered = name.lower()
        for k, v in self._headers:
            if k.lower() == lowered:
                return v
        return None

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    # -- Body --

    def write(self, data: str | bytes) -> "Response":
        """Append to the buffered body. Strings are UTF-8 encoded."""
        self._check_open()
        self._chunks.append(data.encode("utf-8") if isinstance(data, str) else data)
        return self

    async def end(self, data: str | bytes | None = None) -> None:
        """Finish the response and hand it to the server.

        Raises ``ResponseAlreadySent`` if called twice.
        """
        if data is not None:
            self.write(data)
        self._check_open()
        self.finished = True

        body = b"".join(self._chunks)
        headers = [(k, v) for k, v in self._headers if k.lower() != "content-length"]
        if body and self.get_header("content-type") is None:
            headers.insert(0, ("content-type", DEFAULT_CONTENT_TYPE))
        await send_response(self.status, headers, body, self._send)

    async def send(self, data: str | bytes) -> None:
        """Write *data* and end the response."""
        await self.end(data)

    async def json(self, value: Any) -> None:
        """Serialize *value* as the JSON body and end the response."""
        if self.get_header("content-type") is None:
            self.set_header("content-type", "application/json")
        await self.end(json_module.dumps(value))
