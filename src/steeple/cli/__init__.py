"""Steeple CLI — serve, preflight, and inspect a front controller.

Entry point registered as ``steeple`` in ``pyproject.toml``::

    [project.scripts]
    steeple = "steeple.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``steeple`` command."""
    parser = argparse.ArgumentParser(
        prog="steeple",
        description="Steeple — front controller for church-management sites.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- steeple run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve the controller with uvicorn")
    run_parser.add_argument("app", help="Import string (e.g. crm.web:controller)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart when source files change",
    )

    # -- steeple check ----------------------------------------------------
    check_parser = subparsers.add_parser(
        "check", help="Verify the Python version requirement and site configuration"
    )
    check_parser.add_argument("app", help="Import string (e.g. crm.web:controller)")

    # -- steeple scripts --------------------------------------------------
    scripts_parser = subparsers.add_parser("scripts", help="List registered scripts")
    scripts_parser.add_argument("app", help="Import string (e.g. crm.web:controller)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from steeple.cli._run import run_server

        run_server(args)
    elif args.command == "check":
        from steeple.cli._check import run_check

        run_check(args)
    elif args.command == "scripts":
        from steeple.cli._scripts import run_scripts

        run_scripts(args)
