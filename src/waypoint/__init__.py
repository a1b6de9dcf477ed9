"""Waypoint — declarative route tables for ASGI services.

Route handlers are assembled from small, independently testable parts:
an input mapper, an optional JSON Schema, a processor holding the
business logic, and an output mapper. Failures at any stage are handed
to the continuation instead of being written by the route itself.

Basic usage::

    from waypoint import App, RouteDefinition

    async def get_user(input, context, ext):
        ext.logger.info("Fetching user")
        return {"id": input["user"]["id"], "env": ext.alias}

    app = App().mount([
        RouteDefinition(
            method="get",
            path="/users/:id",
            handler=get_user,
            input_mapper={"user.id": "params.id"},
        ),
    ])

Without the ASGI host, ``build_routes()`` mounts a table on any object
exposing one registration method per verb.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ArgumentError",
    "ConfigurationError",
    "ExtendedProperties",
    "HTTPError",
    "HandlerBuilder",
    "MethodNotAllowed",
    "NotFound",
    "Request",
    "RequestContext",
    "Response",
    "RouteDefinition",
    "Router",
    "SchemaValidationError",
    "WaypointError",
    "build_routes",
    "create_schema_checker",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name == "App":
        from waypoint.app import App

        return App

    if name == "AppConfig":
        from waypoint.config import AppConfig

        return AppConfig

    if name == "HandlerBuilder":
        from waypoint.builder import HandlerBuilder

        return HandlerBuilder

    if name == "build_routes":
        from waypoint.assembly import build_routes

        return build_routes

    if name == "RouteDefinition":
        from waypoint.definitions import RouteDefinition

        return RouteDefinition

    if name == "Router":
        from waypoint.routing.router import Router

        return Router

    if name == "Request":
        from waypoint.http.request import Request

        return Request

    if name == "Response":
        from waypoint.http.response import Response

        return Response

    if name in ("ExtendedProperties", "RequestContext"):
        from waypoint import context as _ctx

        return getattr(_ctx, name)

    if name == "create_schema_checker":
        from waypoint.schema import create_schema_checker

        return create_schema_checker

    if name in (
        "ArgumentError",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "SchemaValidationError",
        "WaypointError",
    ):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
