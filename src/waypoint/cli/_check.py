"""``waypoint check`` — route table validation command.

Assembles the target's route table without serving it. Unsupported
methods, bad path patterns and invalid input schemas surface here as
``ConfigurationError``; the command exits with code 1 when one is found.
"""

import argparse
import sys

from waypoint.cli._resolve import resolve_target, router_for
from waypoint.errors import ConfigurationError


def run_check(args: argparse.Namespace) -> None:
    """Validate the route table behind ``args.target``."""
    try:
        target = resolve_target(args.target)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        router = router_for(target)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    count = len(router)
    print(f"OK: {count} route{'' if count == 1 else 's'} assembled.")
