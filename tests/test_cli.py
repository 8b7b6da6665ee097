"""Tests for the ``steeple`` command line."""

import sys
import types
from unittest.mock import MagicMock

import pytest

from steeple.cli import main
from steeple.cli._resolve import resolve_controller
from steeple.controller import FrontController


@pytest.fixture
def register_module(monkeypatch: pytest.MonkeyPatch):
    """Install a throwaway module holding *obj* as ``controller``."""

    def register(name: str, obj: object) -> str:
        mod = types.ModuleType(name)
        mod.controller = obj  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, name, mod)
        return name

    return register


class TestResolveController:
    def test_default_attribute(self, register_module, make_controller) -> None:
        controller = make_controller()
        register_module("_steeple_cli_default", controller)
        assert resolve_controller("_steeple_cli_default") is controller

    def test_factory(self, register_module, make_controller) -> None:
        controller = make_controller()
        register_module("_steeple_cli_factory", lambda: controller)
        assert resolve_controller("_steeple_cli_factory:controller") is controller

    def test_wrong_type(self, register_module) -> None:
        register_module("_steeple_cli_wrong", 42)
        with pytest.raises(TypeError, match="not a FrontController"):
            resolve_controller("_steeple_cli_wrong:controller")

    def test_factory_error(self, register_module) -> None:
        def factory() -> FrontController:
            msg = "no config"
            raise RuntimeError(msg)

        register_module("_steeple_cli_broken", factory)
        with pytest.raises(TypeError, match="raised an error"):
            resolve_controller("_steeple_cli_broken")


class TestCheck:
    def test_ok(self, register_module, make_controller, capsys) -> None:
        register_module("_steeple_check_ok", make_controller())
        main(["check", "_steeple_check_ok"])
        out = capsys.readouterr().out
        assert "Required:       3.10" in out
        assert out.rstrip().endswith("OK")

    def test_unknown_requirement_exits_one(
        self, register_module, make_controller, capsys
    ) -> None:
        register_module("_steeple_check_bad", make_controller(manifest_error="no manifest"))
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_steeple_check_bad"])
        assert exc_info.value.code == 1
        assert "Critical System Error: no manifest" in capsys.readouterr().err

    def test_old_runtime_exits_one(self, register_module, make_controller) -> None:
        controller = make_controller(required="3.13", running="3.12.0")
        register_module("_steeple_check_old", controller)
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_steeple_check_old"])
        assert exc_info.value.code == 1

    def test_missing_config_reported(self, register_module, make_controller, capsys) -> None:
        register_module("_steeple_check_setup", make_controller(root_path=None))
        main(["check", "_steeple_check_setup"])
        assert "setup required" in capsys.readouterr().out

    def test_invalid_import_string(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "nonexistent_module_xyz:controller"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestScripts:
    def test_lists_scripts(self, register_module, make_controller, capsys) -> None:
        controller = make_controller()

        @controller.script("ListEvents.py", description="Event calendar")
        def list_events():
            return ""

        controller.add_script("v2/dashboard", lambda: "")
        register_module("_steeple_scripts", controller)
        main(["scripts", "_steeple_scripts"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["NAME", "HANDLER", "DESCRIPTION"]
        assert lines[2].startswith("ListEvents.py")
        assert "Event calendar" in lines[2]
        assert lines[3].startswith("v2/dashboard")

    def test_empty(self, register_module, make_controller, capsys) -> None:
        register_module("_steeple_scripts_empty", make_controller())
        main(["scripts", "_steeple_scripts_empty"])
        assert "No scripts registered." in capsys.readouterr().out


class TestRun:
    def test_run_uses_uvicorn_settings(
        self, register_module, make_controller, monkeypatch
    ) -> None:
        run = MagicMock()
        monkeypatch.setattr("steeple.cli._run.run_dev_server", run)
        controller = make_controller(log_level="debug")
        register_module("_steeple_run", controller)

        main(["run", "_steeple_run", "--port", "9000"])

        run.assert_called_once_with(
            controller,
            "127.0.0.1",
            9000,
            log_level="debug",
            reload=False,
            app_path="_steeple_run",
        )


def test_no_command_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 0
    assert "usage: steeple" in capsys.readouterr().out
