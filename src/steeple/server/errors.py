"""Error handling for dispatched scripts.

Maps HTTPError exceptions and unexpected failures raised after bootstrap
to Response objects, using registered error handlers or plain defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeAlias

from steeple.errors import HTTPError
from steeple.http.request import Request
from steeple.http.response import Response
from steeple.server.negotiation import negotiate

logger = logging.getLogger("steeple.server")

ErrorHandlers: TypeAlias = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result
    return negotiate(result)


def _lookup(error_handlers: ErrorHandlers, exc: Exception) -> Callable[..., Any] | None:
    for exc_type in type(exc).__mro__:
        handler = error_handlers.get(exc_type)
        if handler is not None:
            return handler
    return None


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response = Response(body=detail, status=exc.status, content_type="text/plain; charset=utf-8")
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or _lookup(error_handlers, exc)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        from steeple.server.debug_page import render_debug_page

        return Response(body=render_debug_page(exc, request), status=500)

    return Response(
        body="Internal Server Error", status=500, content_type="text/plain; charset=utf-8"
    )
