"""Contextual logging for handlers.

Built on stdlib ``logging``. A ``HandlerLogger`` carries its context in
``extra`` so every record it emits has attributes such as ``handler``
and ``request_id`` for formatters and log aggregators to pick up::

    logger = get_logger("waypoint.handler", handler="GET /users", request_id="ab12")
    logger.debug("Mapping request to input")

    db_logger = logger.child(step="db")
    db_logger.info("Fetched %d rows", 3)
"""

import logging
from collections.abc import MutableMapping
from typing import Any


class HandlerLogger(logging.LoggerAdapter):
    """Logger adapter with child-context support.

    The adapter's context is merged into each record's ``extra``; values
    passed explicitly through ``extra=`` take precedence.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs

    @property
    def context(self) -> dict[str, Any]:
        """A copy of the context attached to every record."""
        return dict(self.extra or {})

    def child(self, **context: Any) -> "HandlerLogger":
        """Return a new adapter with *context* added to this one's."""
        return HandlerLogger(self.logger, {**(self.extra or {}), **context})

    def trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log at the most verbose level stdlib offers (``DEBUG``)."""
        self.debug(msg, *args, **kwargs)


def get_logger(name: str, **context: Any) -> HandlerLogger:
    """Return a ``HandlerLogger`` for the named stdlib logger."""
    return HandlerLogger(logging.getLogger(name), context)
