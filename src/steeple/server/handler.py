"""ASGI handler — translates ASGI scope/messages to steeple types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, runs the middleware chain around the
controller's dispatch, and sends the Response back through ASGI send().
"""

from collections.abc import Awaitable, Callable
from contextvars import Token
from typing import Any

from steeple._internal.asgi import Receive, Scope, Send
from steeple.context import request_var
from steeple.errors import HTTPError
from steeple.http.request import Request
from steeple.http.response import Response
from steeple.middleware.auth import enter_user_scope, exit_user_scope
from steeple.middleware.protocol import Next
from steeple.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from steeple.server.sender import send_response


def build_chain(
    dispatch: Callable[[Request], Awaitable[Response]],
    middleware: tuple[Callable[..., Any], ...],
) -> Next:
    """Wrap *middleware* around *dispatch*; the first entry runs outermost."""
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatch: Callable[[Request], Awaitable[Response]],
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    # Request and user context vars (reset after dispatch)
    token: Token[Request] = request_var.set(request)
    user_scope = enter_user_scope()
    try:
        response = await build_chain(dispatch, middleware)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        exit_user_scope(user_scope)
        request_var.reset(token)

    await send_response(response, send)
