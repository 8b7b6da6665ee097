"""Tests for the Python version requirement."""

from pathlib import Path

import pytest

from steeple.errors import RequirementError
from steeple.versions import (
    PyprojectManifest,
    minimum_from_specifier,
    parse_version,
    running_version,
    version_below,
)


class TestParseVersion:
    def test_plain(self) -> None:
        assert parse_version("3.12.4") == (3, 12, 4)

    def test_prerelease_tag_ignored(self) -> None:
        assert parse_version("3.13.0rc1") == (3, 13, 0)

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid version"):
            parse_version("three")


class TestVersionBelow:
    def test_older(self) -> None:
        assert version_below("3.9.18", "3.10")

    def test_equal(self) -> None:
        assert not version_below("3.12", "3.12")

    def test_patch_satisfies_minor(self) -> None:
        assert not version_below("3.12.0", "3.12")

    def test_numeric_not_lexical(self) -> None:
        assert not version_below("3.10", "3.9")


class TestMinimumFromSpecifier:
    @pytest.mark.parametrize(
        ("specifier", "expected"),
        [
            (">=3.12", "3.12"),
            (">=3.11,<4", "3.11"),
            ("~=3.12.1", "3.12.1"),
            ("==3.12.*", "3.12"),
            (" >= 3.10 ", "3.10"),
        ],
    )
    def test_lower_bound(self, specifier: str, expected: str) -> None:
        assert minimum_from_specifier(specifier) == expected

    def test_no_lower_bound(self) -> None:
        with pytest.raises(RequirementError, match="declares no minimum"):
            minimum_from_specifier("<4")


class TestPyprojectManifest:
    def test_reads_requires_python(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nrequires-python = ">=3.11"\n', encoding="utf-8")
        assert PyprojectManifest(path).required_version() == "3.11"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RequirementError, match="not found"):
            PyprojectManifest(tmp_path / "pyproject.toml").required_version()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\n", encoding="utf-8")
        with pytest.raises(RequirementError, match="Unable to read"):
            PyprojectManifest(path).required_version()

    def test_missing_key(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "crm"\n', encoding="utf-8")
        with pytest.raises(RequirementError, match="requires-python"):
            PyprojectManifest(path).required_version()

    def test_reread_on_every_call(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nrequires-python = ">=3.10"\n', encoding="utf-8")
        manifest = PyprojectManifest(path)
        assert manifest.required_version() == "3.10"
        path.write_text('[project]\nrequires-python = ">=3.13"\n', encoding="utf-8")
        assert manifest.required_version() == "3.13"


def test_running_version_is_parseable() -> None:
    assert parse_version(running_version())[0] == 3
