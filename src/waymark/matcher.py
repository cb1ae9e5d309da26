"""
URL matcher: resolves a request path and method to a named route.
"""

import logging

from waymark.collection import RouteCollection
from waymark.exceptions import MethodNotAllowed, RouteNotFound
from waymark.types import ROUTE_KEY, Parameters

logger = logging.getLogger("waymark.routing")


class UrlMatcher:
    """
    Linear, first-registered-wins matcher over a :class:`RouteCollection`.

    Distinguishes a path that no route knows (``RouteNotFound``) from a
    path that is known but not under the requested method
    (``MethodNotAllowed``).
    """

    def __init__(self, routes: RouteCollection) -> None:
        self._routes = routes

    @property
    def routes(self) -> RouteCollection:
        return self._routes

    def match(self, path_info: str, method: str = "GET") -> Parameters:
        """
        Find the first route matching the path and method.

        Returns the route parameters with the route name under ``_route``.
        Raises RouteNotFound or MethodNotAllowed if no match.
        """
        method = method.upper()
        allowed_methods: set[str] = set()
        path_matched = False

        for name, route in self._routes.items():
            parameters = route.match(path_info, method)
            if parameters is not None:
                parameters[ROUTE_KEY] = name
                logger.debug("Matched %s %s to route %r", method, path_info, name)
                return parameters

            # Path-only probe: tells a 405 apart from a 404
            if route.methods and route.match_path(path_info) is not None:
                path_matched = True
                allowed_methods.update(route.methods)

        if path_matched:
            logger.debug(
                "Method %s not allowed for %s (allowed: %s)",
                method, path_info, ", ".join(sorted(allowed_methods)),
            )
            raise MethodNotAllowed(allowed_methods)

        logger.debug("No route found for %s %s", method, path_info)
        raise RouteNotFound(path_info)

    def match_route_name(self, path_info: str, method: str = "GET") -> str:
        return str(self.match(path_info, method)[ROUTE_KEY])

    def has_match(self, path_info: str, method: str = "GET") -> bool:
        try:
            self.match(path_info, method)
        except (RouteNotFound, MethodNotAllowed):
            return False
        return True
