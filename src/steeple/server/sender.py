"""ASGI response sending — translates a Response into ASGI messages."""

from steeple._internal.asgi import Send
from steeple.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # 1xx, 204, and 304 responses carry no message body
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(response: Response, body_length: int) -> list[tuple[bytes, bytes]]:
    """Raw ASGI header list: content type, headers, cookies, then length."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    raw_headers.extend(
        (b"set-cookie", cookie.to_header_value().encode("latin-1")) for cookie in response.cookies
    )
    raw_headers.append((b"content-length", str(body_length).encode("latin-1")))
    return raw_headers


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    body = response.body_bytes if _body_allowed(response.status) else b""
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response, len(body)),
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
