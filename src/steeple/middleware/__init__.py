"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in pieces:
    SessionMiddleware -- Signed cookie sessions (installed by the controller)
    SessionAuthenticator -- API key + session authentication gate
"""

from steeple.middleware.auth import AllowAll, AuthConfig, Authenticator, SessionAuthenticator
from steeple.middleware.protocol import Middleware, Next
from steeple.middleware.sessions import SessionConfig, SessionMiddleware

__all__ = [
    "AllowAll",
    "AuthConfig",
    "Authenticator",
    "Middleware",
    "Next",
    "SessionAuthenticator",
    "SessionConfig",
    "SessionMiddleware",
]
