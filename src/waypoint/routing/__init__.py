"""Routing — method-dispatch surface with O(path-depth) matching.

Routes are registered one verb at a time (``router.get(path, handler)``)
and frozen when the ASGI host starts serving.
"""

from waypoint.routing.route import ANY_METHOD, Route, RouteMatch
from waypoint.routing.router import Router, parse_path

__all__ = ["ANY_METHOD", "Route", "RouteMatch", "Router", "parse_path"]
