"""The front controller — every request enters here.

Mutable during setup (script registration, middleware, error handlers).
Frozen when ``run()`` or ``__call__()`` is first invoked.

Per request the controller:

1. serves a standalone page (``setup``, ``runtime-error``) if one matches
2. checks the running Python against the manifest's minimum version
3. loads the site configuration, or redirects to ``setup``
4. resolves the path to ``short_name`` / ``file_name``
5. stores the ``location`` query parameter in the session
6. runs the authenticator
7. applies the dispatch policy and runs the resolved script

Steps 2-7 run inside one ``try``: failures there are handed to the
installed ``ErrorReporter``. Failures inside the script take the ordinary
500 path (``@controller.error(500)``, debug page, or plain text).
"""

from __future__ import annotations

import html
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from steeple._internal.asgi import ErrorHandler, Handler, Receive, Scope, Send
from steeple._internal.invoke import build_kwargs, invoke
from steeple.config import AppConfig
from steeple.dispatch import ResolvedTarget, resolve
from steeple.errors import HTTPError, RequirementError
from steeple.http.request import Request
from steeple.http.response import Redirect, Response
from steeple.middleware.auth import AllowAll, Authenticator, get_user
from steeple.middleware.protocol import Middleware
from steeple.middleware.sessions import SessionConfig, SessionMiddleware, get_session
from steeple.naming import normalize_text
from steeple.routing.registry import ScriptRegistry
from steeple.routing.script import Script
from steeple.server.handler import handle_request
from steeple.server.negotiation import negotiate
from steeple.server.reporting import (
    DebugPageReporter,
    ErrorReporter,
    PlainTextReporter,
    requirement_failure_response,
)
from steeple.site import SiteConfig, load_site_config
from steeple.versions import PyprojectManifest, running_version, version_below

logger = logging.getLogger("steeple.bootstrap")


class VersionManifest(Protocol):
    """Anything that can declare the minimum supported Python version."""

    def required_version(self) -> str: ...


@dataclass(frozen=True, slots=True)
class _Dispatch:
    """Outcome of a successful bootstrap: the script and what it may receive."""

    script: Script
    site: SiteConfig
    target: ResolvedTarget


@dataclass(frozen=True, slots=True)
class PreflightReport:
    """Result of ``FrontController.preflight()`` (used by ``steeple check``)."""

    running: str
    required: str | None
    config_path: Path
    config_exists: bool
    problems: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.problems


class FrontController:
    """The steeple front controller.

    Usage::

        controller = FrontController(AppConfig(secret_key="s3cr3t"))

        @controller.script("ListEvents.py")
        def list_events(request):
            return "<h1>Events</h1>"

    Thread safety:
        Registration happens at import time. The freeze transition uses a
        Lock + double-check so exactly one thread compiles the registry
        and middleware chain, even when several workers take their first
        request at once.
    """

    __slots__ = (
        "_authenticator",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_manifest",
        "_middleware",
        "_middleware_list",
        "_registry",
        "_reporter",
        "_runtime_version",
        "_site_loader",
        "_standalone",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        manifest: VersionManifest | None = None,
        runtime_version: Callable[[], str] = running_version,
        site_loader: Callable[[Path], SiteConfig | None] = load_site_config,
        authenticator: Authenticator | None = None,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._manifest: VersionManifest = manifest or PyprojectManifest(self.config.manifest_path)
        self._runtime_version = runtime_version
        self._site_loader = site_loader
        self._authenticator: Authenticator = authenticator or AllowAll()
        if reporter is None:
            if self.config.startup_debug:
                reporter = DebugPageReporter(config_path=self.config.site_config_path)
            else:
                reporter = PlainTextReporter()
        self._reporter: ErrorReporter = reporter

        self._registry = ScriptRegistry()
        self._standalone: dict[str, Handler] = {}
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state — set during _freeze()
        self._middleware: tuple[Callable[..., Any], ...] = ()

    # -- Registration --

    def script(self, name: str, *, description: str = "") -> Callable[[Handler], Handler]:
        """Register a script under its registry name via decorator.

        The name is what a request resolves to: the path with the root
        stripped (``v2/dashboard``) or its CamelCase form with the script
        suffix (``ListEvents.py`` for ``/list-events``).
        """

        def decorator(func: Handler) -> Handler:
            self.add_script(name, func, description=description)
            return func

        return decorator

    def add_script(self, name: str, handler: Handler, *, description: str = "") -> None:
        """Register a script without the decorator."""
        self._check_not_frozen()
        self._registry.add(Script(name=name, handler=handler, description=description))

    def standalone(self, name: str) -> Callable[[Handler], Handler]:
        """Register a page served before the version and config gates.

        Matched on the last path segment, so ``/crm/setup`` and ``/setup``
        both reach the ``"setup"`` page. Replaces the built-in default.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._standalone[name] = func
            return func

        return decorator

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware; it runs inside the session middleware."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    @property
    def registry(self) -> ScriptRegistry:
        return self._registry

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the controller and serve it with uvicorn."""
        self._ensure_frozen()

        from steeple.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
        )

    def preflight(self) -> PreflightReport:
        """Check the manifest, the running version, and the site config.

        Runs the same checks as the request bootstrap without a request.
        """
        problems: list[str] = []
        running = self._runtime_version()
        required: str | None = None
        try:
            required = self._manifest.required_version()
        except RequirementError as exc:
            problems.append(f"Critical System Error: {exc}")
        else:
            if version_below(running, required):
                problems.append(f"Python {running} is older than the required {required}")

        config_path = self.config.site_config_path
        try:
            config_exists = self._site_loader(config_path) is not None
        except Exception as exc:
            config_exists = config_path.exists()
            problems.append(f"{type(exc).__name__}: {exc}")

        return PreflightReport(
            running=running,
            required=required,
            config_path=config_path,
            config_exists=config_exists,
            problems=tuple(problems),
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            dispatch=self._dispatch,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup so configuration errors surface before traffic."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Request pipeline --

    async def _dispatch(self, request: Request) -> Response:
        page = self._standalone.get(_last_segment(request.path))
        if page is not None:
            return negotiate(await invoke(page, **self._kwargs(page, request)))

        outcome = await self._bootstrap(request)
        if isinstance(outcome, Response):
            return outcome

        handler = outcome.script.handler
        logger.debug("%s %s -> %s", request.method, request.path, outcome.script.name)
        result = await invoke(handler, **self._kwargs(handler, request, outcome))
        return negotiate(result)

    async def _bootstrap(self, request: Request) -> _Dispatch | Response:
        """Everything between the request arriving and the script running."""
        try:
            return await self._bootstrap_steps(request)
        except HTTPError:
            raise
        except RequirementError as exc:
            return requirement_failure_response(exc)
        except Exception as exc:
            logger.exception("Bootstrap failed for %s %s", request.method, request.path)
            return self._reporter.report(exc, request)

    async def _bootstrap_steps(self, request: Request) -> _Dispatch | Response:
        required = self._manifest.required_version()
        running = self._runtime_version()
        if version_below(running, required):
            logger.warning("Python %s is older than the required %s", running, required)
            return Redirect(self.config.version_error_page).to_response()

        site = self._site_loader(self.config.site_config_path)
        if site is None:
            logger.info("No site configuration at %s", self.config.site_config_path)
            return Redirect(self.config.setup_page).to_response()

        target = ResolvedTarget.from_path(
            request.path, root_path=site.root_path, suffix=self.config.script_suffix
        )

        location = request.query.get("location")
        if location:
            get_session()["location"] = normalize_text(location)

        halt = await self._authenticator.ensure_authentication(
            request, short_name=target.short_name, root_path=site.root_path
        )
        if halt is not None:
            return halt

        outcome = resolve(
            target,
            self._registry,
            url=normalize_text(request.url),
            root_path=site.root_path,
            config=self.config,
        )
        if isinstance(outcome, Response):
            return outcome
        return _Dispatch(script=outcome, site=site, target=target)

    def _kwargs(
        self, handler: Handler, request: Request, dispatch: _Dispatch | None = None
    ) -> dict[str, Any]:
        available: dict[str, Any] = {
            "request": request,
            "session": get_session(),
            "user": get_user(),
            "config": self.config,
        }
        if dispatch is not None:
            available["site"] = dispatch.site
            available["target"] = dispatch.target
        return build_kwargs(handler, available, Request)

    # -- Built-in standalone pages --

    def _runtime_error_page(self) -> Response:
        try:
            required = self._manifest.required_version()
        except RequirementError:
            required = "unknown"
        body = (
            "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
            "<title>Unsupported Python version</title></head><body>"
            "<h1>Unsupported Python version</h1>"
            f"<p>This server runs Python {html.escape(self._runtime_version())}; "
            f"at least {html.escape(required)} is required.</p>"
            "</body></html>"
        )
        return Response(body=body, status=500)

    def _setup_page(self) -> Response:
        path = self.config.site_config_path
        body = (
            "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
            "<title>Setup required</title></head><body>"
            "<h1>Setup required</h1>"
            f"<p>No site configuration was found. Create <code>{html.escape(str(path))}</code> "
            "to finish the installation.</p>"
            "</body></html>"
        )
        return Response(body=body)

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the controller into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        self._standalone.setdefault(self.config.version_error_page, self._runtime_error_page)
        self._standalone.setdefault(self.config.setup_page, self._setup_page)

        self._registry.compile()

        sessions = SessionMiddleware(
            SessionConfig(
                secret_key=self.config.secret_key,
                cookie_name=self.config.session_cookie,
                max_age=self.config.session_max_age,
            )
        )
        self._middleware = (sessions, *self._middleware_list)

        self._frozen = True
        logger.debug(
            "Controller frozen: %d scripts, %d standalone pages",
            len(self._registry),
            len(self._standalone),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the controller after it has started serving requests. "
                "Register scripts, pages, and middleware before calling run()."
            )
            raise RuntimeError(msg)


def _last_segment(path: str) -> str:
    return path.rstrip("/").rpartition("/")[2]
