"""Per-invocation context handed to processors.

Every processor is called as ``processor(input, context, ext)``:

- ``context`` is a ``RequestContext`` with metadata about the current
  invocation (the correlation id that tags its log lines).
- ``ext`` is an ``ExtendedProperties`` bundle with a logger already
  bound to the handler name and request id, and the execution alias.

Both are created fresh for each request and never shared.
"""

from dataclasses import dataclass

from waypoint.log import HandlerLogger


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Metadata about the current handler invocation."""

    request_id: str


@dataclass(frozen=True, slots=True)
class ExtendedProperties:
    """Collaborators made available to processors at run time."""

    logger: HandlerLogger
    alias: str
