"""Declarative route definitions.

A route table is a sequence of ``RouteDefinition`` objects::

    ROUTES = [
        RouteDefinition(
            method="get",
            path="/users/:id",
            handler=get_user,
            input_mapper={"user.id": "params.id"},
            schema={"type": "object", "required": ["user"]},
        ),
        RouteDefinition(method="post", path="/users", handler=create_user,
                        input_mapper=lambda req: {"user": req.body},
                        output_mapper=created),
    ]

``build_routes(ROUTES)`` turns the table into a mounted ``Router``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from waypoint._internal.types import InputMapper, MappingTable, OutputMapper, Processor

# Methods a route definition may name, after lower-casing
HTTP_METHODS: tuple[str, ...] = ("all", "get", "post", "put", "delete", "patch", "options")

_ALIASES = {"inputMapper": "input_mapper", "outputMapper": "output_mapper"}


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """One declarative route.

    ``input_mapper`` is either a function of the raw request or a table of
    ``{destination_path: source_path}`` dot paths. ``schema`` is a JSON
    Schema checked against the mapped input. ``name`` defaults to
    ``"<METHOD> <path>"`` when the route is assembled.
    """

    method: str
    path: str
    handler: Processor
    input_mapper: MappingTable | InputMapper | None = None
    schema: Mapping[str, Any] | None = None
    output_mapper: OutputMapper | None = None
    name: str | None = None

    @property
    def handler_name(self) -> str:
        """The explicit name, or ``"<METHOD> <path>"``."""
        return self.name or f"{self.method} {self.path}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RouteDefinition":
        """Build a definition from a plain dict.

        Accepts ``inputMapper`` / ``outputMapper`` as aliases. Unknown keys
        raise ``TypeError``.
        """
        fields = {_ALIASES.get(key, key): value for key, value in data.items()}
        return cls(**fields)


def coerce_definition(definition: "RouteDefinition | Mapping[str, Any]") -> RouteDefinition:
    """Return *definition* as a ``RouteDefinition``."""
    if isinstance(definition, RouteDefinition):
        return definition
    return RouteDefinition.from_mapping(definition)
