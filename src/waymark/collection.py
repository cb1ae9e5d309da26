"""
Ordered, uniquely-named set of routes.

Insertion order is significant: it is the order in which the matcher
tries routes, so the first registered route wins on ambiguous paths.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from waymark.exceptions import DuplicateRouteName, RoutingError, UnknownRoute
from waymark.route import Route
from waymark.types import ParamValue

logger = logging.getLogger("waymark.routing")


class RouteCollection:
    """
    Insertion-ordered mapping from route name to :class:`Route`.

    Iterating yields names; :meth:`items` yields ``(name, route)``
    pairs in registration order.
    """

    __slots__ = ("_routes", "_frozen")

    def __init__(self) -> None:
        self._routes: dict[str, Route] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._routes))

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __getitem__(self, name: str) -> Route:
        return self.get(name)

    def __repr__(self) -> str:
        return f"RouteCollection({list(self._routes)!r})"

    def items(self) -> Iterator[tuple[str, Route]]:
        """Yield ``(name, route)`` pairs in insertion order."""
        return iter(list(self._routes.items()))

    # ------------------------------------------------------------------
    # Single-route operations
    # ------------------------------------------------------------------

    def add(self, name: str, route: Route) -> None:
        """Add a route. Raises DuplicateRouteName if the name is taken."""
        self._ensure_mutable()
        if name in self._routes:
            raise DuplicateRouteName(name)
        self._routes[name] = route

    def get(self, name: str) -> Route:
        try:
            return self._routes[name]
        except KeyError:
            raise UnknownRoute(name) from None

    def has(self, name: str) -> bool:
        return name in self._routes

    def remove(self, name: str) -> bool:
        """Remove a route. Returns False if no route has that name."""
        self._ensure_mutable()
        return self._routes.pop(name, None) is not None

    def all(self) -> dict[str, Route]:
        return dict(self._routes)

    def names(self) -> list[str]:
        return list(self._routes)

    def clear(self) -> None:
        self._ensure_mutable()
        self._routes.clear()

    # ------------------------------------------------------------------
    # Bulk transforms
    # ------------------------------------------------------------------

    def add_collection(self, collection: "RouteCollection", override: bool = False) -> None:
        """
        Merge another collection, in its order.

        On a name collision the merge fails unless ``override`` is set. An
        overriding route takes the position it has in the merge, not the
        slot of the route it replaces.
        """
        self._ensure_mutable()
        incoming = list(collection.items())
        if not override:
            for name, _ in incoming:
                if name in self._routes:
                    raise DuplicateRouteName(
                        name, "Pass override=True to replace it."
                    )

        for name, route in incoming:
            if self._routes.pop(name, None) is not None:
                logger.debug("Route %r overridden by merged collection", name)
            self._routes[name] = route

    def add_prefix(self, prefix: str) -> None:
        """Prepend a path prefix to every route. Trailing slashes are trimmed."""
        self._ensure_mutable()
        prefix = prefix.rstrip("/")
        if not prefix:
            return
        for route in self._routes.values():
            route.set_path(prefix + route.path)

    def add_name_prefix(self, prefix: str) -> None:
        """Prepend a prefix to every route name, keeping the order."""
        self._ensure_mutable()
        if not prefix:
            return
        renamed = {f"{prefix}{name}": route for name, route in self._routes.items()}
        if len(renamed) != len(self._routes):
            raise RoutingError(f"Name prefix {prefix!r} produces duplicate route names.")
        self._routes = renamed

    def add_defaults(self, defaults: Mapping[str, ParamValue]) -> None:
        """Broadcast defaults; values a route already defines are kept."""
        self._ensure_mutable()
        for route in self._routes.values():
            route.set_defaults({**defaults, **route.defaults})

    def add_requirements(self, requirements: Mapping[str, str]) -> None:
        """Broadcast requirements; values a route already defines are kept."""
        self._ensure_mutable()
        for route in self._routes.values():
            route.set_requirements({**requirements, **route.requirements})

    def set_methods(self, methods: Iterable[str]) -> None:
        self._ensure_mutable()
        methods = list(methods)
        for route in self._routes.values():
            route.set_methods(methods)

    # ------------------------------------------------------------------
    # Freezing
    # ------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Compile every route and refuse further modification."""
        for route in self._routes.values():
            route.freeze()
        self._frozen = True

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RoutingError("Route collection is frozen and cannot be modified.")

    # ------------------------------------------------------------------
    # Declarative form
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, config: Mapping[str, Mapping[str, Any]]) -> "RouteCollection":
        """
        Build a collection from ``{name: {path, defaults?, requirements?, methods?}}``.

        Raises:
            RoutingError: If a record has no ``path``.
        """
        collection = cls()
        for name, record in config.items():
            if not isinstance(record, Mapping) or "path" not in record:
                raise RoutingError(f'Route "{name}" must have a "path" key.')
            collection.add(name, Route.from_dict(record))
        return collection

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: route.to_dict() for name, route in self._routes.items()}
