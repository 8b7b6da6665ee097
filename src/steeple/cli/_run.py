"""``steeple run`` — serve a controller with uvicorn."""

import argparse

from steeple.cli._resolve import resolve_or_exit
from steeple.server.dev import run_dev_server


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it; CLI flags override the config."""
    controller = resolve_or_exit(args.app)
    controller._ensure_frozen()

    run_dev_server(
        controller,
        args.host or controller.config.host,
        args.port or controller.config.port,
        log_level=controller.config.log_level,
        reload=args.reload,
        app_path=args.app,
    )
