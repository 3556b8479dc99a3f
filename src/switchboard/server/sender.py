"""ASGI response sending — translates a Response into ASGI messages."""

from switchboard._internal.asgi import Send
from switchboard.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(response: Response, body: bytes) -> list[tuple[bytes, bytes]]:
    """Raw ASGI header pairs for *response*, content-length included."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    return raw_headers


async def send_response(response: Response, send: Send) -> None:
    """Send *response* as one ``http.response.start`` and one body message."""
    body = response.body_bytes if _body_allowed(response.status) else b""

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response, body),
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
