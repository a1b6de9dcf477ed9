"""Waypoint application — an ASGI host for assembled route tables.

Mutable during setup (mounting route tables, registering error handlers).
Frozen when ``__call__()`` is first invoked.
"""

import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeAlias

from waypoint._internal.asgi import Receive, Scope, Send
from waypoint.assembly import build_routes
from waypoint.config import AppConfig
from waypoint.definitions import RouteDefinition
from waypoint.routing.router import Router
from waypoint.server.handler import handle_request

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]


class App:
    """The waypoint application.

    Usage::

        app = App()
        app.mount(ROUTES)

        @app.error(SchemaValidationError)
        def invalid(request, exc):
            return {"message": exc.detail, "errors": list(exc.errors)}

    Serve it with any ASGI server.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread compiles the router, even if
        several workers receive their first request concurrently.
    """

    __slots__ = (
        "_environ",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_router",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        router: Router | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router: Router = router if router is not None else Router()
        self._environ = environ
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    @property
    def router(self) -> Router:
        return self._router

    # -- Setup --

    def mount(self, definitions: Iterable[RouteDefinition | Mapping[str, Any]]) -> "App":
        """Assemble *definitions* onto the app's router.

        Raises ``ConfigurationError`` for a malformed route table.
        """
        self._check_not_frozen()
        build_routes(
            definitions,
            self._router,
            environ=self._environ,
            alias_variable=self.config.alias_variable,
            alias_default=self.config.default_alias,
        )
        return self

    def error(
        self,
        code_or_exception: int | type[BaseException],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point. Only ``http`` scopes are handled."""
        if scope["type"] != "http":
            return

        self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            error_handlers=self._error_handlers,
            config=self.config,
        )

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.compile()
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Mount routes and register error handlers before the first request."
            )
            raise RuntimeError(msg)
