"""Target resolution — request path to script, redirect, or 404.

Pure functions over the script registry; the controller feeds them the
normalized path and acts on the outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from steeple.config import AppConfig
from steeple.errors import NotFound
from steeple.http.response import Redirect, Response
from steeple.naming import normalize_text, script_file_name, strip_root
from steeple.routing.registry import ScriptRegistry
from steeple.routing.script import Script

logger = logging.getLogger("steeple.bootstrap")

_ASSET_MARKERS = ("js", "css")
_ASSET_EXTENSIONS = (".js", ".css")


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    """The two names a request path can be served under.

    ``short_name`` is the path with the root prefix stripped;
    ``file_name`` is its dash-to-CamelCase form plus the script suffix.
    """

    short_name: str
    file_name: str

    @classmethod
    def from_path(cls, path: str, *, root_path: str, suffix: str) -> ResolvedTarget:
        short_name = strip_root(normalize_text(path), root_path)
        return cls(short_name=short_name, file_name=script_file_name(short_name, suffix))

    def names_controller(self, controller_name: str) -> bool:
        """True if either name is the controller's own, ignoring case."""
        own = controller_name.lower()
        return self.short_name.lower() == own or self.file_name.lower() == own


def looks_like_asset(url: str, mode: Literal["substring", "extension"] = "substring") -> bool:
    """Whether an unresolved request URI should get a 404 instead of a redirect.

    ``"substring"`` matches "js" or "css" anywhere in the URI, query
    string included, so ``/jsonx`` counts. ``"extension"`` only matches
    paths ending in ``.js`` or ``.css``.
    """
    if mode == "extension":
        path = url.partition("?")[0].lower()
        return path.endswith(_ASSET_EXTENSIONS)
    return any(marker in url for marker in _ASSET_MARKERS)


def resolve(
    target: ResolvedTarget,
    registry: ScriptRegistry,
    *,
    url: str,
    root_path: str,
    config: AppConfig,
) -> Script | Response:
    """Apply the dispatch policy; first match wins.

    1. the controller's own name -> redirect to the dashboard
    2. a script registered under ``short_name``
    3. a script registered under ``file_name``
    4. a static-asset-looking URI -> ``NotFound``
    5. anything else -> redirect to the controller under the site root
    """
    if target.names_controller(config.controller_name):
        location = f"{root_path}{config.dashboard_path}"
        logger.debug("%s names the controller -> %s", target.short_name, location)
        return Redirect(location).to_response()

    script = registry.lookup(target.short_name)
    if script is not None:
        return script

    script = registry.lookup(target.file_name)
    if script is not None:
        return script

    if looks_like_asset(url, config.asset_match):
        logger.debug("No script for asset-like %s", url)
        raise NotFound(f"No script for {url!r}")

    location = f"{root_path}/{config.controller_name}"
    logger.debug("No script for %s -> %s", url, location)
    return Redirect(location).to_response()
