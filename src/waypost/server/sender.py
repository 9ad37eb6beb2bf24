"""ASGI response sending — turns a finished Response into ASGI messages."""

import logging

from waypost._internal.asgi import Send

logger = logging.getLogger("waypost.server")


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC 9110: 1xx, 204, and 304 responses carry no content.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(
    status: int,
    headers: list[tuple[str, str]],
    body: bytes,
    send: Send,
) -> None:
    """Send a complete, buffered response as start + single body message."""
    if not body_allowed(status):
        if body:
            logger.debug("Dropping %d-byte body for status %d", len(body), status)
        body = b""

    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers
    ]
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send({"type": "http.response.start", "status": status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": body})
