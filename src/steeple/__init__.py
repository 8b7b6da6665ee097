"""Steeple — front controller for church-management web sites.

Every request enters through one ASGI callable that checks the Python
version requirement, loads the site configuration, authenticates, and
dispatches to a registered script.

Basic usage::

    from steeple import AppConfig, FrontController

    controller = FrontController(AppConfig(secret_key="s3cr3t"))

    @controller.script("ListEvents.py")
    def list_events():
        return "<h1>Events</h1>"

    controller.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "ConfigurationError",
    "FrontController",
    "HTTPError",
    "NotFound",
    "Redirect",
    "Request",
    "RequirementError",
    "Response",
    "SteepleError",
    "get_request",
    "get_session",
    "get_user",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import steeple`` fast while providing a clean top-level API.
    """
    if name == "FrontController":
        from steeple.controller import FrontController

        return FrontController

    if name == "AppConfig":
        from steeple.config import AppConfig

        return AppConfig

    if name == "Request":
        from steeple.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from steeple.http import response

        return getattr(response, name)

    if name in ("SteepleError", "ConfigurationError", "HTTPError", "NotFound", "RequirementError"):
        from steeple import errors

        return getattr(errors, name)

    if name == "get_request":
        from steeple.context import get_request

        return get_request

    if name == "get_session":
        from steeple.middleware.sessions import get_session

        return get_session

    if name == "get_user":
        from steeple.middleware.auth import get_user

        return get_user

    msg = f"module 'steeple' has no attribute {name!r}"
    raise AttributeError(msg)
