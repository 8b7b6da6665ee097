"""Controller configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. Site-specific settings (root path, database) live
in the site configuration file instead; see ``steeple.site``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Front controller configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(secret_key="s3cr3t", app_root="/srv/crm")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    # Security
    secret_key: str = ""
    session_cookie: str = "steeple_session"
    session_max_age: int = 86400  # 24 hours

    # Files, relative to app_root unless absolute
    app_root: str | Path = "."
    manifest: str | Path = "pyproject.toml"
    site_config: str | Path = "include/config.toml"

    # Dispatch
    controller_name: str = "index.py"
    script_suffix: str = ".py"
    dashboard_path: str = "/v2/dashboard"
    setup_page: str = "setup"
    version_error_page: str = "runtime-error"
    asset_match: Literal["substring", "extension"] = "substring"

    # Render the HTML diagnostic page for failures before dispatch;
    # False answers with a plaintext 500 instead.
    startup_debug: bool = True

    def resolve(self, path: str | Path) -> Path:
        """Resolve *path* against ``app_root`` (absolute paths pass through)."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return Path(self.app_root) / candidate

    @property
    def manifest_path(self) -> Path:
        """Absolute location of the version manifest."""
        return self.resolve(self.manifest)

    @property
    def site_config_path(self) -> Path:
        """Absolute location of the site configuration file."""
        return self.resolve(self.site_config)
