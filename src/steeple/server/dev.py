"""Development server.

Starts a uvicorn ASGI server with the live FrontController object.
"""

from __future__ import annotations

from typing import Any


def run_dev_server(
    app: Any,
    host: str,
    port: int,
    *,
    log_level: str = "info",
    reload: bool = False,
    app_path: str | None = None,
) -> None:
    """Start a uvicorn server with the given controller.

    uvicorn can serve a live ASGI object, but reloading needs an import
    string, so ``reload`` only takes effect when ``app_path`` is given.

    Args:
        app: ASGI callable (FrontController instance).
        host: Bind host address.
        port: Bind port number.
        log_level: uvicorn log level name.
        reload: Restart on file changes (requires ``app_path``).
        app_path: Optional ``"module:attribute"`` import string.
    """
    import uvicorn

    if reload and app_path:
        uvicorn.run(app_path, host=host, port=port, log_level=log_level, reload=True)
        return
    uvicorn.run(app, host=host, port=port, log_level=log_level)
