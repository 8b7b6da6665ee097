"""Controller import resolution — ``"module:attribute"`` to a FrontController.

Shared by ``steeple run``, ``steeple check`` and ``steeple scripts``.
"""

import importlib
import sys

from steeple.controller import FrontController


def resolve_controller(import_string: str) -> FrontController:
    """Resolve an import string to a FrontController instance.

    Accepts ``"module:attribute"``; the attribute defaults to
    ``"controller"``. A callable that is not a controller is treated as a
    factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a ``FrontController``.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "controller"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, FrontController):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, FrontController):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a FrontController"
        raise TypeError(msg)

    return obj


def resolve_or_exit(import_string: str) -> FrontController:
    """``resolve_controller`` that prints the error and exits 1 on failure."""
    try:
        return resolve_controller(import_string)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
