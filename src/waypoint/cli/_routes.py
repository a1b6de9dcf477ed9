"""``waypoint routes`` — list assembled routes.

Resolves an import string and prints every route with its methods, path
and handler name.
"""

import argparse
import sys

from waypoint.cli._resolve import resolve_target, router_for
from waypoint.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATH / NAME table for ``args.target``."""
    try:
        router = router_for(resolve_target(args.target))
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = router.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for route in routes:
        methods_str = ", ".join(sorted("ALL" if m == "*" else m for m in route.methods))
        name = route.name or getattr(route.handler, "__name__", str(route.handler))
        rows.append((methods_str, route.path, name))

    max_methods = max(max(len(r[0]) for r in rows), 6)  # "METHOD" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header

    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "NAME"))
    sep_len = max_methods + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for methods_str, path, name in rows:
        print(fmt.format(methods_str, path, name))
