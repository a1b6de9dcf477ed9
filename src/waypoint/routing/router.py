"""Method-dispatch router with trie-based path matching.

Exposes one registration function per supported verb, each taking
``(path, handler)``, so route tables can be mounted declaratively::

    router = Router()
    router.get("/users/:id", show_user)
    router.post("/users", create_user)
    router.all("/health", health)

    match = router.match("GET", "/users/42")
    match.path_params  # {"id": "42"}
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from waypoint.errors import ConfigurationError, MethodNotAllowed, NotFound
from waypoint.routing.params import CONVERTERS
from waypoint.routing.route import ANY_METHOD, PathSegment, Route, RouteMatch

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _param_segment(part: str, name: str, param_type: str, path: str) -> PathSegment:
    if not _NAME_RE.match(name):
        msg = f"Invalid path parameter name {name!r} in route path {path!r}."
        raise ConfigurationError(msg)
    if param_type not in CONVERTERS:
        known = ", ".join(sorted(CONVERTERS))
        msg = f"Unknown path parameter type {param_type!r} in {path!r}. Known types: {known}."
        raise ConfigurationError(msg)
    return PathSegment(value=part, is_param=True, param_name=name, param_type=param_type)


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/:id"         -> [..., PathSegment(":id", is_param=True, param_name="id")]
        "/users/{id}"        -> [..., PathSegment("{id}", is_param=True, param_name="id")]
        "/users/{id:int}"    -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]

    Raises ``ConfigurationError`` for malformed parameter segments.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route path {path!r} uses <param> syntax. "
                "Use :param or {param} for path parameters."
            )
            raise ConfigurationError(msg)
        if part.startswith(":"):
            segments.append(_param_segment(part, part[1:], "str", path))
        elif part.startswith("{") and part.endswith("}"):
            name, _, param_type = part[1:-1].partition(":")
            segments.append(_param_segment(part, name, param_type or "str", path))
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie."""

    __slots__ = ("catch_all", "children", "param_edges", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter edges, tried in registration order
        self.param_edges: list[_ParamEdge] = []
        # Catch-all edge (path converter), consumes the rest of the path
        self.catch_all: _CatchAllEdge | None = None
        # Routes terminating at this node, keyed by upper-case method or "*"
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge — consumes remaining path."""

    param_name: str
    routes_by_method: dict[str, Route]


class Router:
    """Method-dispatch surface for mounted routes.

    Mutable until ``compile()``; the ASGI host compiles it on first request.
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._routes: list[Route] = []
        self._compiled = False

    def __len__(self) -> int:
        return len(self._routes)

    # -- Registration --

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(
                        param_name=seg.param_name or "path",
                        routes_by_method={},
                    )
                self._bind(node.catch_all.routes_by_method, route)
                self._routes.append(route)
                return

            if seg.is_param:
                node = self._param_node(node, seg)
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        self._bind(node.routes_by_method, route)
        self._routes.append(route)

    @staticmethod
    def _param_node(node: _TrieNode, seg: PathSegment) -> _TrieNode:
        for edge in node.param_edges:
            if edge.param_name == seg.param_name and edge.param_type == seg.param_type:
                return edge.node
        edge = _ParamEdge(
            param_name=seg.param_name or "",
            param_type=seg.param_type,
            regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
            node=_TrieNode(),
        )
        node.param_edges.append(edge)
        return edge.node

    @staticmethod
    def _bind(table: dict[str, Route], route: Route) -> None:
        # First registration wins, as with sequential route lookup
        for method in route.methods:
            table.setdefault(method, route)

    def _register(
        self,
        method: str,
        path: str,
        handler: Callable[..., Any],
        name: str | None,
    ) -> "Router":
        self.add(Route(path=path, handler=handler, methods=frozenset({method}), name=name))
        return self

    def all(self, path: str, handler: Callable[..., Any], *, name: str | None = None) -> "Router":
        """Mount *handler* on *path* for every HTTP method."""
        return self._register(ANY_METHOD, path, handler, name)

    def get(self, path: str, handler: Callable[..., Any], *, name: str | None = None) -> "Router":
        """Mount *handler* on ``GET`` *path*."""
        return self._register("GET", path, handler, name)

    def post(self, path: str, handler: Callable[..., Any], *, name: str | None = None) -> "Router":
        """Mount *handler* on ``POST`` *path*."""
        return self._register("POST", path, handler, name)

    def put(self, path: str, handler: Callable[..., Any], *, name: str | None = None) -> "Router":
        """Mount *handler* on ``PUT`` *path*."""
        return self._register("PUT", path, handler, name)

    def delete(
        self, path: str, handler: Callable[..., Any], *, name: str | None = None
    ) -> "Router":
        """Mount *handler* on ``DELETE`` *path*."""
        return self._register("DELETE", path, handler, name)

    def patch(
        self, path: str, handler: Callable[..., Any], *, name: str | None = None
    ) -> "Router":
        """Mount *handler* on ``PATCH`` *path*."""
        return self._register("PATCH", path, handler, name)

    def options(
        self, path: str, handler: Callable[..., Any], *, name: str | None = None
    ) -> "Router":
        """Mount *handler* on ``OPTIONS`` *path*."""
        return self._register("OPTIONS", path, handler, name)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    # -- Matching --

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request method and path against the mounted routes.

        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        method = method.upper()
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes_by_method, params = result
        route = routes_by_method.get(method) or routes_by_method.get(ANY_METHOD)
        if route is not None:
            return RouteMatch(route=route, path_params=params)

        raise MethodNotAllowed(frozenset(routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        """Recursively match path parts; static beats param beats catch-all."""
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        for edge in node.param_edges:
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.routes_by_method, {
                **params,
                node.catch_all.param_name: remaining,
            }

        return None
