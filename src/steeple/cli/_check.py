"""``steeple check`` — preflight the version requirement and site config.

Exits with code 1 if the minimum Python version cannot be determined,
the running interpreter is too old, or the site configuration is invalid.
A missing site configuration is reported but is not a failure: a fresh
install is expected to go through ``setup``.
"""

import argparse
import sys

from steeple.cli._resolve import resolve_or_exit


def run_check(args: argparse.Namespace) -> None:
    """Print the preflight report for ``args.app``."""
    controller = resolve_or_exit(args.app)
    report = controller.preflight()

    print(f"Python:         {report.running}")
    print(f"Required:       {report.required or 'unknown'}")
    state = "found" if report.config_exists else "missing (setup required)"
    print(f"Site config:    {report.config_path} [{state}]")

    if report.ok:
        print("OK")
        return

    for problem in report.problems:
        print(problem, file=sys.stderr)
    raise SystemExit(1)
