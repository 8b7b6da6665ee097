"""Error-reporting strategies for failures before dispatch.

The controller wraps its bootstrap phase (version gate, site config,
authentication, script resolution) in one scoped ``try`` and hands any
unrecovered exception to the installed reporter. Once a script has been
resolved the reporter is out of the picture; script failures take the
ordinary 500 path in ``steeple.server.errors``.
"""

import logging
from pathlib import Path
from typing import Protocol

from steeple.errors import RequirementError
from steeple.http.request import Request
from steeple.http.response import Response
from steeple.server.debug_page import render_startup_page

logger = logging.getLogger("steeple.bootstrap")

_PLAIN = "text/plain; charset=utf-8"


class ErrorReporter(Protocol):
    """Turns a bootstrap failure into the response that halts the request."""

    def report(self, exc: Exception, request: Request) -> Response: ...


class DebugPageReporter:
    """Renders the HTML diagnostic page (traceback, request, environment)."""

    __slots__ = ("_app_name", "_config_path")

    def __init__(self, *, config_path: Path, app_name: str = "Steeple") -> None:
        self._config_path = config_path
        self._app_name = app_name

    def report(self, exc: Exception, request: Request) -> Response:
        body = render_startup_page(
            exc, request, app_name=self._app_name, config_path=self._config_path
        )
        return Response(body=body, status=500)


class PlainTextReporter:
    """Answers with a terse plaintext 500 and keeps details in the log."""

    __slots__ = ()

    def report(self, exc: Exception, request: Request) -> Response:
        return Response(
            body=f"Unhandled Exception: {type(exc).__name__}\n",
            status=500,
            content_type=_PLAIN,
        )


def requirement_failure_response(exc: RequirementError) -> Response:
    """Plaintext 500 for a minimum version that cannot be determined."""
    logger.error("Cannot determine the required Python version: %s", exc)
    return Response(
        body=(
            f"Critical System Error: {exc}\n\n"
            "Please contact your system administrator or check your installation."
        ),
        status=500,
        content_type=_PLAIN,
    )
