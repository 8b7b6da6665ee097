"""Shared fixtures: controllers wired to in-memory manifests and site configs."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from steeple.config import AppConfig
from steeple.controller import FrontController
from steeple.errors import RequirementError
from steeple.site import SiteConfig


class FixedManifest:
    """Version manifest with a fixed answer (or a fixed failure)."""

    def __init__(self, required: str = "3.10", *, error: str | None = None) -> None:
        self.required = required
        self.error = error

    def required_version(self) -> str:
        if self.error is not None:
            raise RequirementError(self.error)
        return self.required


@pytest.fixture
def make_controller() -> Callable[..., FrontController]:
    """Factory for a controller that never touches the filesystem.

    Keyword arguments:
        root_path: site root prefix (``None`` simulates a missing config file)
        required / running: manifest minimum and interpreter version
        manifest_error: make the manifest raise ``RequirementError``
        site_loader: replace the config loader entirely
        anything else: forwarded to ``AppConfig`` or ``FrontController``
    """

    def factory(
        *,
        root_path: str | None = "/crm",
        required: str = "3.10",
        running: str = "3.12.4",
        manifest_error: str | None = None,
        site_loader: Callable[[Path], SiteConfig | None] | None = None,
        authenticator: Any = None,
        reporter: Any = None,
        **config: Any,
    ) -> FrontController:
        config.setdefault("secret_key", "test-secret")
        if site_loader is None:
            site = None if root_path is None else SiteConfig(root_path=root_path)

            def site_loader(path: Path) -> SiteConfig | None:
                return site

        return FrontController(
            AppConfig(**config),
            manifest=FixedManifest(required, error=manifest_error),
            runtime_version=lambda: running,
            site_loader=site_loader,
            authenticator=authenticator,
            reporter=reporter,
        )

    return factory


@pytest.fixture
def app_root(tmp_path: Path) -> Path:
    """An install directory with a manifest and a site configuration file."""
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "crm"\nrequires-python = ">=3.10"\n', encoding="utf-8"
    )
    include = tmp_path / "include"
    include.mkdir()
    (include / "config.toml").write_text(
        '[site]\nroot_path = "/crm"\n\n[database]\nname = "churchcrm"\n', encoding="utf-8"
    )
    return tmp_path
