"""Request-scoped context via ContextVar.

``request_var`` holds the current ``Request`` for this task. It is set by
the ASGI handler before the bootstrap runs and reset after the response
is built.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threaded servers. No locks needed.
"""

from contextvars import ContextVar

from steeple.http.request import Request

request_var: ContextVar[Request] = ContextVar("steeple_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
