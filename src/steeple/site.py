"""Site configuration file — written by the setup flow, read per request.

The file is TOML::

    [site]
    root_path = "/churchcrm"
    urls = ["https://crm.example.org/"]
    lock_url = false

    [database]
    host = "localhost"
    port = 3306
    user = "churchcrm"
    password = "secret"
    name = "churchcrm"

A missing file means the install has not been set up yet; the controller
redirects to ``setup``. A file that exists but cannot be parsed is an
operator error and raises ``SiteConfigError``.
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from steeple.errors import SiteConfigError


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings handed to downstream scripts."""

    host: str = "localhost"
    port: int = 3306
    user: str = ""
    password: str = field(default="", repr=False)
    name: str = ""


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Loaded site configuration. Immutable after creation.

    ``root_path`` is the URL prefix of the install (``""`` when served
    from the domain root), normalized to a leading slash and no trailing
    slash.
    """

    root_path: str = ""
    urls: tuple[str, ...] = ()
    lock_url: bool = False
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    source: Path | None = None


def normalize_root_path(root_path: str) -> str:
    """``"churchcrm/"`` -> ``"/churchcrm"``; ``"/"`` and ``""`` -> ``""``."""
    stripped = root_path.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def _expect(table: dict[str, Any], key: str, kind: type, default: Any, source: Path) -> Any:
    value = table.get(key, default)
    # bool is an int subclass; reject it where an int is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        msg = f"{source}: {key!r} must be {kind.__name__}, got {type(value).__name__}"
        raise SiteConfigError(msg)
    return value


def _table(data: dict[str, Any], name: str, source: Path) -> dict[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        msg = f"{source}: [{name}] must be a table"
        raise SiteConfigError(msg)
    return table


def parse_site_config(data: dict[str, Any], source: Path) -> SiteConfig:
    """Build a ``SiteConfig`` from decoded TOML data."""
    site = _table(data, "site", source)
    db = _table(data, "database", source)

    urls = _expect(site, "urls", list, [], source)
    if not all(isinstance(url, str) for url in urls):
        msg = f"{source}: 'urls' must be a list of strings"
        raise SiteConfigError(msg)

    database = DatabaseConfig(
        host=_expect(db, "host", str, "localhost", source),
        port=_expect(db, "port", int, 3306, source),
        user=_expect(db, "user", str, "", source),
        password=_expect(db, "password", str, "", source),
        name=_expect(db, "name", str, "", source),
    )
    return SiteConfig(
        root_path=normalize_root_path(_expect(site, "root_path", str, "", source)),
        urls=tuple(urls),
        lock_url=_expect(site, "lock_url", bool, False, source),
        database=database,
        source=source,
    )


def load_site_config(path: Path) -> SiteConfig | None:
    """Load the site configuration, or return ``None`` if it does not exist.

    Raises ``SiteConfigError`` if the file exists but is not valid.
    """
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as exc:
        msg = f"{path}: invalid TOML: {exc}"
        raise SiteConfigError(msg) from exc
    return parse_site_config(data, path)
