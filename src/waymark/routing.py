"""
Routing facade for Waymark.

Composes one :class:`UrlMatcher` and one :class:`UrlGenerator` over a
single :class:`RouteCollection`, and loads route definitions from
declarative configuration.
"""

import json
import logging
import tomllib
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from waymark.collection import RouteCollection
from waymark.exceptions import RoutingError
from waymark.generator import UrlGenerator
from waymark.matcher import UrlMatcher
from waymark.route import Route
from waymark.types import CONTROLLER_KEY, Controller, ParamValue, Parameters

logger = logging.getLogger("waymark.routing")


class Router:
    """
    Matching and generation over one route collection.

    Usage:
        router = Router.from_dict({
            "article_show": {
                "path": "/article/{id}",
                "defaults": {"_controller": "blog.views:show"},
                "requirements": {"id": r"\\d+"},
                "methods": ["GET"],
            },
        })
        router.match("/article/42")       # {..., "id": "42", "_route": "article_show"}
        router.generate("article_show", {"id": 42})  # "/article/42"
    """

    def __init__(self, routes: RouteCollection | None = None) -> None:
        self._routes = routes if routes is not None else RouteCollection()
        self._matcher: UrlMatcher | None = None
        self._generator: UrlGenerator | None = None

    @property
    def routes(self) -> RouteCollection:
        return self._routes

    @property
    def matcher(self) -> UrlMatcher:
        if self._matcher is None:
            self._matcher = UrlMatcher(self._routes)
        return self._matcher

    @property
    def generator(self) -> UrlGenerator:
        if self._generator is None:
            self._generator = UrlGenerator(self._routes)
        return self._generator

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match(self, path_info: str, method: str = "GET") -> Parameters:
        """Raises RouteNotFound or MethodNotAllowed if no match."""
        return self.matcher.match(path_info, method)

    def match_route_name(self, path_info: str, method: str = "GET") -> str:
        return self.matcher.match_route_name(path_info, method)

    def has_match(self, path_info: str, method: str = "GET") -> bool:
        return self.matcher.has_match(path_info, method)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, name: str, parameters: Mapping[str, Any] | None = None) -> str:
        return self.generator.generate(name, parameters)

    def generate_multiple(
        self,
        routes_with_parameters: Mapping[str, Mapping[str, Any] | None],
    ) -> dict[str, str]:
        return self.generator.generate_multiple(routes_with_parameters)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_route(
        self,
        name: str,
        route: Route | str,
        handler: Callable[..., Any] | str | None = None,
        methods: Iterable[str] | None = None,
        defaults: Mapping[str, ParamValue] | None = None,
        requirements: Mapping[str, str] | None = None,
    ) -> Route:
        """
        Register a route under ``name``.

        Accepts a ready :class:`Route` or a path template plus keyword
        arguments. ``handler`` is stored as the ``_controller`` default.
        """
        if isinstance(route, str):
            route_defaults: Parameters = dict(defaults or {})
            if handler is not None:
                route_defaults[CONTROLLER_KEY] = Controller(handler)
            route = Route(route, route_defaults, requirements, methods)
        self._routes.add(name, route)
        return route

    def has_route(self, name: str) -> bool:
        return self._routes.has(name)

    def get_route(self, name: str) -> Route:
        return self._routes.get(name)

    def warm_up(self, freeze: bool = True) -> None:
        """
        Compile every route before serving traffic.

        With ``freeze`` the collection and its routes become read-only,
        which makes them safe to share between concurrent requests.
        """
        if freeze:
            self._routes.freeze()
        else:
            for _, route in self._routes.items():
                route.compile()
        logger.info("Compiled %d routes", len(self._routes))

    # ------------------------------------------------------------------
    # Declarative form
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return self._routes.to_dict()

    @classmethod
    def from_dict(cls, config: Mapping[str, Mapping[str, Any]]) -> "Router":
        return cls(RouteCollection.from_dict(config))

    @classmethod
    def from_file(cls, file: str | Path) -> "Router":
        """
        Load routes from a JSON or TOML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            RoutingError: If the file does not hold a mapping of routes.
        """
        path = Path(file)
        if not path.is_file():
            raise FileNotFoundError(f'Routes file "{path}" does not exist.')

        try:
            if path.suffix == ".toml":
                with path.open("rb") as f:
                    config = tomllib.load(f)
            else:
                with path.open("r", encoding="utf-8") as f:
                    config = json.load(f)
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
            raise RoutingError(f'Routes file "{path}" cannot be parsed: {exc}') from exc

        if not isinstance(config, dict):
            raise RoutingError(f'Routes file "{path}" must contain a mapping of routes.')

        logger.debug("Loading %d routes from %s", len(config), path)
        return cls.from_dict(config)
