"""Steeple exception hierarchy.

Shared across the controller, registry, handler, and middleware so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class SteepleError(Exception):
    """Base for all steeple-specific errors."""


class ConfigurationError(SteepleError):
    """Raised when controller configuration is invalid.

    Typically caught during ``FrontController._freeze()`` at startup.
    """


class SiteConfigError(ConfigurationError):
    """The site configuration file exists but cannot be loaded."""


class RequirementError(SteepleError):
    """The minimum Python version cannot be determined.

    Unrecoverable: the request is answered with a plaintext 500 and
    ``steeple check`` exits with status 1.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(SteepleError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@controller.error()``
    handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no script and no fallback for the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
