"""Handler builder — composes one route's request handler.

Breaks request handling into distinct phases so that business logic
never touches transport objects:

(1) Input mapping: build a plain dict from the incoming request
(2) Validation: check the dict against a JSON Schema, when one is set
(3) Processing: hand the dict to the processor and await its result
(4) Output mapping: write the result to the response

Usage::

    handler = (
        HandlerBuilder("get-user", get_user)
        .set_input_mapper({"user.id": "params.id"})
        .set_schema(USER_SCHEMA)
        .build()
    )
    router.get("/users/:id", handler)

Any failure in phases 1-4 is logged and passed to the ``next``
continuation; the handler never writes an error response itself and
never raises.
"""

import uuid
from collections.abc import Mapping
from typing import Any

from waypoint._internal.invoke import invoke
from waypoint._internal.types import (
    Continuation,
    InputMapper,
    MappingTable,
    OutputMapper,
    Processor,
    RequestHandler,
)
from waypoint.config import ALIAS_VARIABLE, DEFAULT_ALIAS, resolve_alias
from waypoint.context import ExtendedProperties, RequestContext
from waypoint.errors import ArgumentError
from waypoint.log import get_logger
from waypoint.mapping import apply_mapping_table, split_path
from waypoint.schema import create_schema_checker


def _default_input_mapper(request: Any) -> dict[str, Any]:
    return {}


async def _default_output_mapper(data: Any, response: Any, next: Continuation) -> None:
    response.json(data)


def _new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class HandlerBuilder:
    """Builds a request handler ``(request, response, next)`` for one route.

    The handler name and processor are fixed at construction; mappers and
    schema are configured through chainable setters. ``build()`` captures
    the configuration at that moment, so later setter calls only affect
    handlers built afterwards.
    """

    __slots__ = (
        "_alias_default",
        "_alias_variable",
        "_environ",
        "_handler_name",
        "_input_mapper",
        "_output_mapper",
        "_processor",
        "_schema",
    )

    def __init__(
        self,
        handler_name: str,
        processor: Processor,
        *,
        environ: Mapping[str, str] | None = None,
        alias_variable: str = ALIAS_VARIABLE,
        alias_default: str = DEFAULT_ALIAS,
    ) -> None:
        """
        Args:
            handler_name: Identifies the handler in log records. Required.
            processor: Called as ``processor(input, context, ext)``; may be
                sync or async.
            environ: Source of the execution alias. Defaults to
                ``os.environ``, read on each request.
            alias_variable: Environment key holding the alias.
            alias_default: Alias used when the variable is unset.
        """
        if not isinstance(handler_name, str) or not handler_name:
            msg = "handler_name cannot be empty (arg #1)"
            raise ArgumentError(msg)

        self._handler_name = handler_name
        self._processor = processor
        self._environ = environ
        self._alias_variable = alias_variable
        self._alias_default = alias_default
        self._schema: Mapping[str, Any] | None = None
        self._input_mapper: InputMapper = _default_input_mapper
        self._output_mapper: OutputMapper = _default_output_mapper

    @property
    def handler_name(self) -> str:
        return self._handler_name

    def set_input_mapper(self, mapping: MappingTable | InputMapper | None) -> "HandlerBuilder":
        """Set how the request is turned into the processor's input.

        Args:
            mapping: A function ``request -> dict`` used as-is, or a table
                of ``{destination_path: source_path}`` dot paths read from
                the request (``params``, ``query``, ``headers``,
                ``cookies``, ``body``). ``None`` restores the default
                mapper, which produces ``{}``.

        Raises:
            ArgumentError: for an unsupported type, or a table with an
                empty destination or a non-string source path.

        Returns:
            The builder, for chaining.
        """
        if mapping is None:
            self._input_mapper = _default_input_mapper
        elif callable(mapping):
            self._input_mapper = mapping
        elif isinstance(mapping, Mapping):
            table = dict(mapping)
            for destination, origin in table.items():
                if not isinstance(destination, str) or not split_path(destination):
                    msg = f"input mapping table has an empty destination path: {destination!r}"
                    raise ArgumentError(msg)
                if not isinstance(origin, str):
                    msg = f"input mapping source for {destination!r} must be a str path"
                    raise ArgumentError(msg)

            def map_input(request: Any) -> dict[str, Any]:
                return apply_mapping_table(table, request)

            self._input_mapper = map_input
        else:
            msg = (
                "input mapper must be a function or a property mapping table, "
                f"got {type(mapping).__name__}"
            )
            raise ArgumentError(msg)
        return self

    def set_schema(self, schema: Mapping[str, Any]) -> "HandlerBuilder":
        """Set the JSON Schema the mapped input must satisfy.

        Returns:
            The builder, for chaining.
        """
        self._schema = schema
        return self

    def set_output_mapper(self, mapping: OutputMapper) -> "HandlerBuilder":
        """Set how the processor's result is written to the response.

        Args:
            mapping: Called as ``mapping(data, response, next)``; may be
                sync or async. Use ``next(error)`` to hand an error to the
                downstream error handlers.

        Returns:
            The builder, for chaining.
        """
        self._output_mapper = mapping
        return self

    def build(self) -> RequestHandler:
        """Compile the configuration into a request handler.

        Raises ``ConfigurationError`` if the schema is not a valid JSON Schema.
        """
        handler_name = self._handler_name
        processor = self._processor
        input_mapper = self._input_mapper
        output_mapper = self._output_mapper
        environ = self._environ
        alias_variable = self._alias_variable
        alias_default = self._alias_default
        schema_checker = (
            create_schema_checker(self._schema) if self._schema is not None else None
        )

        async def handler(request: Any, response: Any, next: Continuation) -> None:
            request_id = _new_request_id()
            logger = get_logger("waypoint.handler", handler=handler_name, request_id=request_id)

            try:
                logger.trace("HANDLER START")
                logger.trace("Mapping request to input")
                input_data = await invoke(input_mapper, request)
                logger.trace("Handler input: %r", input_data)

                if schema_checker is not None:
                    logger.trace("Validating input schema")
                    schema_checker(input_data, True)
                else:
                    logger.trace("No schema specified. Skipping schema validation")

                logger.trace("Executing handler")
                output = await invoke(
                    processor,
                    input_data,
                    RequestContext(request_id=request_id),
                    ExtendedProperties(
                        logger=logger,
                        alias=resolve_alias(
                            environ, variable=alias_variable, default=alias_default
                        ),
                    ),
                )
                logger.trace("Handler output: %r", output)
                logger.trace("HANDLER END")

                await invoke(output_mapper, output, response, next)
            except Exception as exc:
                logger.exception("Error executing handler")
                logger.trace("HANDLER END")
                try:
                    await invoke(next, exc)
                except Exception:
                    logger.exception("Error forwarding failure to continuation")

        handler.__name__ = f"handler[{handler_name}]"
        handler.__qualname__ = handler.__name__
        return handler

