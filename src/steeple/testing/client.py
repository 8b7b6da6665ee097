"""Async test client for steeple controllers.

Uses the same Request and Response types as production.
No wrapper translation layer.
"""

from __future__ import annotations

from typing import Any

from steeple.controller import FrontController
from steeple.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for steeple controllers.

    Returns the same ``Response`` type used in production. Sends requests
    through the ASGI interface directly — no HTTP involved. Cookies set
    by responses are kept and sent back on later requests, so a login
    followed by a protected request behaves like a browser would.

    Usage::

        async with TestClient(controller) as client:
            response = await client.get("/list-events")
            assert response.status == 200
    """

    __slots__ = ("controller", "cookies")

    def __init__(self, controller: FrontController) -> None:
        self.controller = controller
        self.cookies: dict[str, str] = {}

    async def __aenter__(self) -> TestClient:
        self.controller._ensure_frozen()
        return self

    async def __aexit__(self, *args: object) -> None:
        self.cookies.clear()

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request. *path* may carry a query string."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: dict[str, object] | None = None,
    ) -> Response:
        """Send a POST request."""
        extra_headers: dict[str, str] = {}
        request_body = body or b""

        if json is not None:
            import json as json_module

            request_body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"

        merged = {**extra_headers, **(headers or {})}
        return await self.request("POST", path, headers=merged, body=request_body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        path_part, _, query_string = path.partition("?")

        merged = dict(headers or {})
        if self.cookies and not any(name.lower() == "cookie" for name in merged):
            merged["cookie"] = "; ".join(f"{k}={v}" for k, v in self.cookies.items())

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in merged.items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("utf-8"),
            "query_string": query_string.encode("utf-8"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        response_status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                response_body_parts.append(message.get("body", b""))

        await self.controller(scope, receive, send)

        content_type = "text/html; charset=utf-8"
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name_str = name_b.decode("latin-1")
            value_str = value_b.decode("latin-1")
            if name_str == "content-type":
                content_type = value_str
            elif name_str != "content-length":
                extra_headers.append((name_str, value_str))
            if name_str == "set-cookie":
                self._store_cookie(value_str)

        return Response(
            body=b"".join(response_body_parts),
            status=response_status,
            content_type=content_type,
            headers=tuple(extra_headers),
        )

    def _store_cookie(self, header_value: str) -> None:
        name, _, rest = header_value.partition("=")
        value = rest.split(";", 1)[0]
        if "Max-Age=0" in header_value or not value:
            self.cookies.pop(name, None)
        else:
            self.cookies[name] = value
