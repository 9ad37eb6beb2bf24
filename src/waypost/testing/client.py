"""Async test client for waypost applications.

Sends requests through the ASGI interface directly — no sockets, no HTTP
parsing — and collects what the app sends back.
"""

import json as json_module
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from waypost._internal.invoke import invoke
from waypost.app import App


@dataclass(frozen=True, slots=True)
class TestResponse:
    """What the app sent for one request."""

    __test__ = False  # Tell pytest this is not a test class

    status: int
    headers: tuple[tuple[str, str], ...]
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json_module.loads(self.body)

    def header(self, name: str) -> str | None:
        """First value of *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for k, v in self.headers:
            if k == lowered:
                return v
        return None


class TestClient:
    """Async test client for waypost applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/users/42")
            assert response.status == 200

    Entering the client runs the app's startup hooks; leaving it runs the
    shutdown hooks.
    """

    __test__ = False  # Tell pytest this is not a test class
    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        for hook in self.app._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.app._shutdown_hooks:
            await invoke(hook)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
    ) -> TestResponse:
        """Send one request. *path* is sent as-is, encoded escapes included."""
        path_part, _, query_string = path.partition("?")
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]
        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "scheme": "http",
            "path": unquote(path_part),
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if body_sent:
                return {"type": "http.disconnect"}
            body_sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        status = 0
        response_headers: list[tuple[str, str]] = []
        chunks: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers.extend(
                    (k.decode("latin-1"), v.decode("latin-1")) for k, v in message.get("headers", [])
                )
            elif message["type"] == "http.response.body":
                chunks.append(message.get("body", b""))

        await self.app(scope, receive, send)
        return TestResponse(status=status, headers=tuple(response_headers), body=b"".join(chunks))

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        json: Any = None,
    ) -> TestResponse:
        """Send a POST request; ``json=`` encodes the body and sets Content-Type."""
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            headers = {"content-type": "application/json", **(headers or {})}
        return await self.request("POST", path, headers=headers, body=body)

    async def put(
        self, path: str, *, headers: dict[str, str] | None = None, body: bytes = b""
    ) -> TestResponse:
        return await self.request("PUT", path, headers=headers, body=body)

    async def patch(
        self, path: str, *, headers: dict[str, str] | None = None, body: bytes = b""
    ) -> TestResponse:
        return await self.request("PATCH", path, headers=headers, body=body)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        return await self.request("DELETE", path, headers=headers)

    async def options(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        return await self.request("OPTIONS", path, headers=headers)
