"""Waypoint exception hierarchy.

Shared across the builder, the assembler, the router, and the ASGI host
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when a route table or builder is configured incorrectly.

    Always raised at assembly time, never while serving a request.
    """


class ArgumentError(ConfigurationError):
    """Raised when a builder receives an invalid argument."""


@dataclass(frozen=True, slots=True)
class HTTPError(WaypointError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, the request parser, or processors. The ASGI
    host turns these into responses through the registered error handlers.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class SchemaValidationError(HTTPError):
    """400 — mapped handler input does not satisfy the route schema.

    ``errors`` holds one message per schema violation, ``detail`` the first.
    """

    def __init__(self, detail: str, errors: tuple[str, ...] = ()) -> None:
        super().__init__(status=400, detail=detail)
        object.__setattr__(self, "errors", errors or (detail,))
