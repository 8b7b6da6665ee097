"""Tests for the script registry."""

import pytest

from steeple.errors import ConfigurationError
from steeple.routing import Script, ScriptRegistry
from steeple.routing.registry import split_name


def _handler() -> str:
    return "ok"


class TestSplitName:
    def test_single(self) -> None:
        assert split_name("ListEvents.py") == ["ListEvents.py"]

    def test_nested_with_slashes(self) -> None:
        assert split_name("/reports//ReportList.py/") == ["reports", "ReportList.py"]

    def test_empty(self) -> None:
        assert split_name("") == []


class TestScriptRegistry:
    def test_lookup(self) -> None:
        registry = ScriptRegistry()
        script = Script("ListEvents.py", _handler)
        registry.add(script)
        registry.compile()
        assert registry.lookup("ListEvents.py") is script
        assert registry.lookup("/ListEvents.py") is script

    def test_missing(self) -> None:
        registry = ScriptRegistry()
        registry.add(Script("reports/ReportList.py", _handler))
        assert registry.lookup("reports") is None
        assert registry.lookup("Missing.py") is None
        assert registry.lookup("") is None

    def test_case_sensitive(self) -> None:
        registry = ScriptRegistry()
        registry.add(Script("ListEvents.py", _handler))
        assert registry.lookup("listevents.py") is None

    def test_nested(self) -> None:
        registry = ScriptRegistry()
        registry.add(Script("v2/dashboard", _handler))
        assert "v2/dashboard" in registry
        assert "v2" not in registry

    def test_duplicate_raises(self) -> None:
        registry = ScriptRegistry()
        registry.add(Script("ListEvents.py", _handler))
        with pytest.raises(ConfigurationError, match="already registered"):
            registry.add(Script("/ListEvents.py", _handler))

    @pytest.mark.parametrize("name", ["", "/", "../secret.py", "reports/./List.py"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(ConfigurationError):
            ScriptRegistry().add(Script(name, _handler))

    def test_add_after_compile(self) -> None:
        registry = ScriptRegistry()
        registry.compile()
        with pytest.raises(RuntimeError, match="after compilation"):
            registry.add(Script("ListEvents.py", _handler))

    def test_scripts_sorted(self) -> None:
        registry = ScriptRegistry()
        for name in ("b.py", "a/c.py", "a.py"):
            registry.add(Script(name, _handler))
        assert [s.name for s in registry.scripts] == ["a.py", "a/c.py", "b.py"]
        assert len(registry) == 3
