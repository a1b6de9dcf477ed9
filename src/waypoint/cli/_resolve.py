"""Import resolution — turns ``"module:attribute"`` strings into routers.

Shared by ``waypoint routes`` and ``waypoint check``. The target may be
an ``App``, a ``Router``, or a sequence of route definitions; zero-arg
factories returning any of those are called first.
"""

import importlib
from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias

from waypoint.app import App
from waypoint.assembly import build_routes
from waypoint.definitions import RouteDefinition
from waypoint.routing.router import Router

Target: TypeAlias = App | Router | Sequence[RouteDefinition | Mapping[str, Any]]


def resolve_target(import_string: str) -> Target:
    """Resolve an import string to an App, Router, or route table.

    When the attribute portion is omitted it defaults to ``"app"``.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is none of the accepted kinds.

    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    # Factory functions: call them unless the object is already usable
    if callable(obj) and not isinstance(obj, (App, Router)):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, (App, Router)):
        return obj
    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        return obj

    msg = (
        f"{import_string!r} resolved to {type(obj).__name__}, "
        "not an App, Router, or sequence of route definitions"
    )
    raise TypeError(msg)


def router_for(target: Target) -> Router:
    """Return the compiled router behind *target*.

    Route tables are assembled onto a fresh router, so malformed
    definitions raise ``ConfigurationError`` here.
    """
    if isinstance(target, App):
        target._ensure_frozen()
        return target.router
    if isinstance(target, Router):
        router = target
    else:
        router = build_routes(target, environ={})
    router.compile()
    return router
