"""Route assembly — mounts declarative route definitions on a router.

Each definition becomes one ``HandlerBuilder``; the built handler is
registered on the router under the definition's method and path::

    router = build_routes([
        RouteDefinition(method="get", path="/users/:id", handler=get_user,
                        input_mapper={"user.id": "params.id"}),
    ])

Assembly fails fast: an unsupported method, an empty handler name, or an
invalid schema raises ``ConfigurationError`` before the offending route
is registered.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from waypoint.builder import HandlerBuilder
from waypoint.config import ALIAS_VARIABLE, DEFAULT_ALIAS
from waypoint.definitions import HTTP_METHODS, RouteDefinition, coerce_definition
from waypoint.errors import ConfigurationError
from waypoint.log import HandlerLogger
from waypoint.routing.router import Router

logger = logging.getLogger("waypoint.assembly")


def resolve_method(router: Any, method: str, route_name: str) -> Callable[..., Any]:
    """Return the router's registration function for *method*.

    The method is lower-cased and must be one of ``HTTP_METHODS``.

    Raises:
        ConfigurationError: naming the method and the route.
    """
    normalized = method.lower() if isinstance(method, str) else method
    if normalized not in HTTP_METHODS:
        msg = f"Unsupported HTTP method {method!r} for route {route_name!r}."
        raise ConfigurationError(msg)
    register = getattr(router, normalized, None)
    if not callable(register):
        msg = f"Router has no {normalized!r} registration function for route {route_name!r}."
        raise ConfigurationError(msg)
    return register


def build_routes(
    definitions: Iterable[RouteDefinition | Mapping[str, Any]],
    router: Any = None,
    *,
    environ: Mapping[str, str] | None = None,
    alias_variable: str = ALIAS_VARIABLE,
    alias_default: str = DEFAULT_ALIAS,
) -> Any:
    """Build handlers for *definitions* and mount them on a router.

    Args:
        definitions: Route definitions, mounted in order. Plain dicts are
            accepted and converted with ``RouteDefinition.from_mapping``.
        router: Any object with one ``(path, handler)`` registration
            function per verb. A new ``Router`` is created if omitted;
            only that router also receives the route name.
        environ: Source of the execution alias passed to every handler.
            Defaults to ``os.environ``.
        alias_variable: Environment key holding the alias.
        alias_default: Alias used when the variable is unset.

    Returns:
        The router, with one route mounted per definition.
    """
    if router is None:
        router = Router()

    logger.debug("Adding routes to router")
    for entry in definitions:
        definition = coerce_definition(entry)
        handler_name = definition.handler_name
        route_logger = HandlerLogger(logger, {"route": handler_name})

        register = resolve_method(router, definition.method, handler_name)

        route_logger.debug("Creating route builder")
        builder = HandlerBuilder(
            handler_name,
            definition.handler,
            environ=environ,
            alias_variable=alias_variable,
            alias_default=alias_default,
        ).set_input_mapper(definition.input_mapper)

        if definition.schema:
            route_logger.debug("Adding schema validation")
            builder.set_schema(definition.schema)

        if definition.output_mapper:
            route_logger.debug("Adding output mapper")
            builder.set_output_mapper(definition.output_mapper)

        route_logger.debug("Mounting route to router")
        handler = builder.build()
        if isinstance(router, Router):
            register(definition.path, handler, name=handler_name)
        else:
            register(definition.path, handler)

    return router
