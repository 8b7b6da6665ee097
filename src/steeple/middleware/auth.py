"""Authentication gate — API key + session auth.

The front controller calls ``ensure_authentication()`` after the
``location`` hint is stored and before the script is resolved. The call
either lets the request through (returning ``None``) or halts it with a
response, normally a redirect to the login page.

The authenticated user is stored in a ContextVar, accessible via
``get_user()`` from any script.

Usage::

    from steeple.middleware.auth import AuthConfig, SessionAuthenticator

    controller = FrontController(
        config,
        authenticator=SessionAuthenticator(AuthConfig(
            load_user=db.get_user_by_id,       # async (id: str) -> User | None
            verify_token=db.get_user_by_key,   # async (key: str) -> User | None
        )),
    )
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Protocol, TypeAlias, runtime_checkable

from steeple.errors import ConfigurationError
from steeple.http.request import Request
from steeple.http.response import Redirect, Response
from steeple.middleware.sessions import get_session, regenerate_session

logger = logging.getLogger("steeple.auth")


@runtime_checkable
class User(Protocol):
    """Minimal user protocol.

    Any object with ``id`` and ``is_authenticated`` satisfies this.
    """

    @property
    def id(self) -> str: ...

    @property
    def is_authenticated(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class AnonymousUser:
    """Sentinel for unauthenticated requests.

    Returned by ``get_user()`` when no user is authenticated, so callers
    never check for ``None``.
    """

    id: str = ""
    is_authenticated: bool = False


ANONYMOUS: AnonymousUser = AnonymousUser()

_user_var: ContextVar[User] = ContextVar("steeple_user", default=ANONYMOUS)
_active_config: ContextVar[AuthConfig | None] = ContextVar("steeple_auth_config", default=None)


def get_user() -> User:
    """Return the current authenticated user (or ``AnonymousUser``)."""
    return _user_var.get()


UserScope: TypeAlias = "tuple[Token[User], Token[AuthConfig | None]]"


def enter_user_scope() -> UserScope:
    """Reset the user to anonymous for one request.

    Pass the returned tokens to ``exit_user_scope`` once the response is built.
    """
    return _user_var.set(ANONYMOUS), _active_config.set(None)


def exit_user_scope(scope: UserScope) -> None:
    user_token, config_token = scope
    _active_config.reset(config_token)
    _user_var.reset(user_token)


def login(user: User) -> None:
    """Log in a user — regenerate session, store user ID, update ContextVar.

    Call from the login script after verifying credentials::

        if user := await verify_credentials(name, password):
            login(user)
            return Redirect(get_session().pop("location", "v2/dashboard"))
    """
    config = _active_config.get()
    if config is None:
        msg = "login() requires an authenticator to be active."
        raise LookupError(msg)

    location = get_session().get("location")
    session = regenerate_session()
    # The redirect hint survives the regeneration
    if location:
        session["location"] = location
    session[config.session_key] = user.id
    _user_var.set(user)
    logger.info("User %s logged in", user.id)


def logout() -> None:
    """Log out the current user — regenerate session and clear ContextVar."""
    config = _active_config.get()
    if config is None:
        msg = "logout() requires an authenticator to be active."
        raise LookupError(msg)

    user_id = _user_var.get().id
    regenerate_session()
    _user_var.set(ANONYMOUS)
    logger.info("User %s logged out", user_id or "<anonymous>")


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Authentication gate configuration.

    Attributes:
        session_key: Session dict key for the user ID.
        token_header: HTTP header carrying an API key.
        load_user: Async callback to load a user by ID (session auth).
        verify_token: Async callback to verify an API key (token auth).
        login_url: Login page, relative to the site root path.
        exclude_paths: Short names (root stripped) that skip the gate.
            The login page always does.
    """

    session_key: str = "user_id"
    token_header: str = "x-api-key"
    load_user: Callable[[str], Awaitable[User | None]] | None = None
    verify_token: Callable[[str], Awaitable[User | None]] | None = None
    login_url: str = "session/begin"
    exclude_paths: frozenset[str] = frozenset({"session/begin"})


class Authenticator(Protocol):
    """The gate the front controller calls before resolving the script.

    Returns ``None`` to let the request through, or a ``Response`` that
    halts it.
    """

    async def ensure_authentication(
        self, request: Request, *, short_name: str, root_path: str
    ) -> Response | None: ...


class AllowAll:
    """Authenticator that lets every request through as anonymous."""

    async def ensure_authentication(
        self, request: Request, *, short_name: str, root_path: str
    ) -> Response | None:
        return None


class SessionAuthenticator:
    """API key first (stateless, for API clients), then the session user.

    Unauthenticated browsers are redirected to the login page; requests
    for excluded short names pass through anonymously.
    """

    __slots__ = ("_config", "_login_name")

    def __init__(self, config: AuthConfig) -> None:
        if config.load_user is None and config.verify_token is None:
            msg = (
                "AuthConfig requires at least one of 'load_user' (session auth) "
                "or 'verify_token' (API key auth) to be set."
            )
            raise ConfigurationError(msg)
        self._config = config
        self._login_name = config.login_url.strip("/")

    @property
    def config(self) -> AuthConfig:
        return self._config

    async def _authenticate_token(self, request: Request) -> User | None:
        if self._config.verify_token is None:
            return None
        key = (request.headers.get(self._config.token_header) or "").strip()
        if not key:
            return None
        user = await self._config.verify_token(key)
        if user is None:
            logger.warning("Rejected API key for %s %s", request.method, request.path)
        return user

    async def _authenticate_session(self) -> User | None:
        if self._config.load_user is None:
            return None
        user_id = get_session().get(self._config.session_key)
        if not user_id:
            return None
        return await self._config.load_user(str(user_id))

    async def ensure_authentication(
        self, request: Request, *, short_name: str, root_path: str
    ) -> Response | None:
        """Authenticate the request or redirect to the login page."""
        _active_config.set(self._config)

        user = await self._authenticate_token(request)
        if user is None:
            user = await self._authenticate_session()
        if user is not None and user.is_authenticated:
            _user_var.set(user)
            return None

        if short_name in self._config.exclude_paths or short_name == self._login_name:
            return None

        login_url = f"{root_path}/{self._config.login_url.lstrip('/')}"
        logger.debug("Unauthenticated %s %s -> %s", request.method, request.path, login_url)
        return Redirect(login_url).to_response()
