"""Waypoint CLI — route table inspection and validation.

Entry point registered as ``waypoint`` in ``pyproject.toml``::

    [project.scripts]
    waypoint = "waypoint.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypoint`` command."""
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Waypoint — declarative route tables for ASGI services.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypoint routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List assembled routes")
    routes_parser.add_argument(
        "target",
        help="Import string of an App, Router, or route table (e.g. myapp:routes)",
    )

    # -- waypoint check ---------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Validate a route table")
    check_parser.add_argument(
        "target",
        help="Import string of an App, Router, or route table (e.g. myapp:routes)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from waypoint.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from waypoint.cli._check import run_check

        run_check(args)
