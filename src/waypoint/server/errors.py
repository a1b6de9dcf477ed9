"""Downstream error handling for forwarded pipeline errors.

Route handlers never write error responses. Whatever they pass to the
continuation ends up here and is mapped to a Response, using registered
error handlers or JSON defaults.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from waypoint._internal.invoke import invoke
from waypoint.errors import HTTPError
from waypoint.http.request import Request
from waypoint.http.response import Response

logger = logging.getLogger("waypoint.server")


def to_response(result: Any) -> Response:
    """Coerce an error handler's return value into a Response.

    Accepts a ``Response``, ``str``/``bytes`` (text), ``dict``/``list``
    (JSON), ``None`` (empty body), or a ``(value, status)`` tuple.
    """
    if isinstance(result, Response):
        return result
    if isinstance(result, tuple) and len(result) == 2:
        value, status = result
        return to_response(value).set_status(status)

    response = Response()
    if result is None:
        response.end()
    elif isinstance(result, bytes):
        response.send(result)
    elif isinstance(result, str):
        response.text(result)
    else:
        response.json(result)
    return response


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: BaseException,
) -> Response:
    """Invoke a registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = await invoke(handler, request, exc)
    elif len(params) == 1:
        result = await invoke(handler, request)
    else:
        result = await invoke(handler)

    return to_response(result)


def _lookup(error_handlers: dict[int | type, Callable[..., Any]], exc: BaseException) -> Any:
    for cls in type(exc).__mro__:
        if cls in error_handlers:
            return error_handlers[cls]
    return None


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Exception type (nearest in the MRO) first, then status code
    handler = _lookup(error_handlers, exc) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response.set_status(exc.status)
        return response

    payload: dict[str, Any] = {"error": exc.detail or f"Error {exc.status}", "status": exc.status}
    errors = getattr(exc, "errors", None)
    if errors:
        payload["errors"] = list(errors)

    response = Response(status=exc.status)
    for name, value in exc.headers:
        response.set_header(name, value)
    response.json(payload)
    return response


async def handle_internal_error(
    exc: BaseException,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.error(
        "500 %s %s",
        request.method,
        request.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )

    handler = _lookup(error_handlers, exc) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response.set_status(500)
        return response

    payload: dict[str, Any] = {"error": "Internal Server Error", "status": 500}
    if debug:
        payload["exception"] = f"{type(exc).__name__}: {exc}"
        payload["traceback"] = traceback.format_exception(exc)

    response = Response(status=500)
    response.json(payload)
    return response
