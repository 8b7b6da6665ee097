"""Session middleware — signed cookie sessions.

Session data is serialized as JSON and signed using ``itsdangerous``.
The session dict is stored in a ContextVar, accessible via
``get_session()`` from the bootstrap, the authenticator, and scripts.

The front controller installs this middleware first, so the session is
available to every step, including the ``location`` hint capture.
"""

import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

from steeple.errors import ConfigurationError
from steeple.http.request import Request
from steeple.http.response import Response, SetCookie
from steeple.middleware.protocol import Next

logger = logging.getLogger("steeple.sessions")

_session_var: ContextVar[dict[str, Any] | None] = ContextVar("steeple_session", default=None)


def get_session() -> dict[str, Any]:
    """Return the current session dict.

    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is installed "
            "before accessing the session."
        )
        raise LookupError(msg)
    return session


def regenerate_session() -> dict[str, Any]:
    """Clear the session in place and return it.

    Discards all data from the previous session; the middleware re-signs
    the (now empty) dict on the response. Called by ``login()`` and
    ``logout()`` to prevent session fixation.
    """
    session = get_session()
    session.clear()
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required — sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "steeple_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


class SessionMiddleware:
    """Signed cookie session middleware.

    Reads the session cookie, verifies the signature and age, exposes the
    dict via ``get_session()``, then signs it back onto the response.
    Tampered or expired cookies start an empty session.
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="steeple.session")

    def _load_session(self, request: Request) -> dict[str, Any]:
        """Deserialize and verify the session cookie."""
        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return {}
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadSignature:
            # SignatureExpired is a BadSignature subclass
            logger.debug("Discarding invalid session cookie for %s", request.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_session(self, response: Response, session: dict[str, Any]) -> Response:
        """Sign the session dict onto the response as a cookie."""
        cfg = self._config
        return response.with_cookie(
            SetCookie(
                name=cfg.cookie_name,
                value=self._serializer.dumps(session),
                max_age=cfg.max_age,
                path=cfg.path,
                secure=cfg.secure,
                httponly=cfg.httponly,
                samesite=cfg.samesite,
            )
        )

    async def __call__(self, request: Request, next: Next) -> Response:
        """Load session, dispatch, then save session to response."""
        session = self._load_session(request)
        token = _session_var.set(session)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)
        # Always rewritten so the signature timestamp slides forward
        return self._save_session(response, session)
