"""Shared type aliases for pipeline callables."""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

from waypoint.context import ExtendedProperties, RequestContext

# Continuation: receives the error when a pipeline stage fails
Continuation: TypeAlias = Callable[..., Awaitable[None] | None]

# Input mapper: raw request -> input object (may return an awaitable)
InputMapper: TypeAlias = Callable[[Any], dict[str, Any] | Awaitable[dict[str, Any]]]

# Declarative input mapping: {destination_path: source_path}
MappingTable: TypeAlias = Mapping[str, str]

# Processor: business logic, decoupled from transport objects
Processor: TypeAlias = Callable[[dict[str, Any], RequestContext, ExtendedProperties], Any]

# Output mapper: (result, response, next) -> None (may return an awaitable)
OutputMapper: TypeAlias = Callable[[Any, Any, Continuation], Awaitable[None] | None]

# Built request handler: (request, response, next)
RequestHandler: TypeAlias = Callable[[Any, Any, Continuation], Awaitable[None]]
