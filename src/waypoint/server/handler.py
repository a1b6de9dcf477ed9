"""ASGI request handling — the host side of the handler pipeline.

The only component that touches raw ASGI directly. Builds the Request,
dispatches it through the router to a route handler together with a
fresh Response and a Continuation, then sends whichever response
results: the one the output mapper wrote, or the error response built
from whatever was passed to the continuation.
"""

import logging
from collections.abc import Callable
from typing import Any

from waypoint._internal.asgi import Receive, Scope, Send
from waypoint._internal.invoke import invoke
from waypoint.config import AppConfig
from waypoint.errors import HTTPError, NotFound
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.routing.router import Router
from waypoint.server.errors import handle_http_error, handle_internal_error
from waypoint.server.sender import send_response

logger = logging.getLogger("waypoint.server")


class Continuation:
    """The ``next`` callable handed to route handlers.

    Called with an exception, it forwards that error to the error
    handlers. Called without one, the request falls through (there is no
    further route to try, so it ends as a 404).
    """

    __slots__ = ("called", "error")

    def __init__(self) -> None:
        self.called = False
        self.error: BaseException | None = None

    def __call__(self, error: BaseException | None = None) -> None:
        if self.called:
            logger.warning("Continuation called more than once; keeping the first call")
            return
        self.called = True
        self.error = error


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    error_handlers: dict[int | type, Callable[..., Any]],
    config: AppConfig,
) -> None:
    """Process a single HTTP request."""
    if scope["type"] != "http":
        return

    request = Request(method=scope.get("method", "GET").upper(), path=scope.get("path", "/"))
    try:
        request = await Request.from_asgi(
            scope, receive, max_content_length=config.max_content_length
        )
        response = await _dispatch(request, router)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, config.debug)

    await send_response(response, send)


async def _dispatch(request: Request, router: Router) -> Response:
    """Run the matched route handler and return the response it wrote.

    Errors forwarded through the continuation are re-raised here so the
    caller maps them exactly like routing and parsing errors.
    """
    match = router.match(request.method, request.path)
    request = request.with_params(match.path_params)

    response = Response()
    continuation = Continuation()
    await invoke(match.route.handler, request, response, continuation)

    if continuation.error is not None:
        raise continuation.error
    if continuation.called:
        raise NotFound(f"No handler completed {request.method} {request.path!r}")
    if not response.sent:
        logger.warning(
            "Route %r completed without writing a response", match.route.name or match.route.path
        )
    return response
