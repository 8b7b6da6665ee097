"""``steeple scripts`` — list registered scripts."""

import argparse

from steeple.cli._resolve import resolve_or_exit


def run_scripts(args: argparse.Namespace) -> None:
    """Print NAME and HANDLER for every registered script."""
    controller = resolve_or_exit(args.app)
    scripts = controller.registry.scripts
    if not scripts:
        print("No scripts registered.")
        return

    rows = [
        (s.name, getattr(s.handler, "__qualname__", str(s.handler)), s.description)
        for s in scripts
    ]
    width_name = max(max(len(r[0]) for r in rows), 4)
    width_handler = max(max(len(r[1]) for r in rows), 7)

    fmt = f"{{:<{width_name}}}  {{:<{width_handler}}}  {{}}"
    print(fmt.format("NAME", "HANDLER", "DESCRIPTION").rstrip())
    print("-" * min(width_name + width_handler + 4 + max(len(r[2]) for r in rows), 80))
    for row in rows:
        print(fmt.format(*row).rstrip())
