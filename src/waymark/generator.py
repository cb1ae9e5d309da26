"""
URL generator: the inverse of matching.
Builds a concrete URL from a route name and parameter values.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Pattern
from urllib.parse import urlencode

from waymark.collection import RouteCollection
from waymark.exceptions import (
    InvalidParameter,
    MissingMandatoryParameters,
    RoutingError,
    UrlGenerationError,
)
from waymark.types import INTERNAL_PREFIX, Controller

logger = logging.getLogger("waymark.routing")

# A placeholder token together with the separator in front of it
_TEMPLATE_SEGMENT: Pattern[str] = re.compile(r"(/?)\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _query_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_stringify(item) for item in value]
    return _stringify(value)


class UrlGenerator:
    """
    Generates URLs for named routes.

    Usage:
        generator = UrlGenerator(routes)
        generator.generate("article_show", {"id": 42, "ref": "feed"})
        # "/article/42?ref=feed"
    """

    def __init__(self, routes: RouteCollection) -> None:
        self._routes = routes

    @property
    def routes(self) -> RouteCollection:
        return self._routes

    def has_route(self, name: str) -> bool:
        return self._routes.has(name)

    def generate(self, name: str, parameters: Mapping[str, Any] | None = None) -> str:
        """
        Generate the URL of a named route.

        Supplied parameters override the route defaults. Parameters that
        fill no placeholder and don't start with ``_`` are appended as a
        query string.

        Raises:
            UnknownRoute: If no route has this name.
            MissingMandatoryParameters: Listing every placeholder without
                a value or default.
            InvalidParameter: If a value fails its requirement.
        """
        route = self._routes.get(name)
        supplied = dict(parameters or {})
        merged = {**route.defaults, **supplied}
        variables = route.variables

        missing = [
            variable
            for variable in variables
            if not route.has_default(variable) and _is_blank(merged.get(variable))
        ]
        if missing:
            raise MissingMandatoryParameters(name, missing)

        url = route.path
        consumed: set[str] = set()

        # Trailing optional segments that only carry their default are left out
        for variable in reversed(variables):
            token = f"/{{{variable}}}"
            if (
                route.has_default(variable)
                and variable not in supplied
                and url.endswith(token)
            ):
                url = url[: -len(token)]
                consumed.add(variable)
                continue
            break

        filled: dict[str, str] = {}
        for variable in variables:
            if variable in consumed:
                continue
            consumed.add(variable)
            value = merged.get(variable)
            if _is_blank(value):
                continue

            text = _stringify(value)
            requirement = route.get_requirement(variable)
            if requirement is not None and re.fullmatch(requirement, text) is None:
                raise InvalidParameter(name, variable, requirement, value)
            filled[variable] = text

        def substitute(token: re.Match[str]) -> str:
            # Unfilled optional segments are dropped with their separator
            variable = token.group(2)
            if variable in filled:
                return token.group(1) + filled[variable]
            return ""

        url = _TEMPLATE_SEGMENT.sub(substitute, url)

        if not url:
            url = "/"
        elif url != "/" and url.endswith("/"):
            url = url[:-1]

        extra = {
            key: _query_value(value)
            for key, value in supplied.items()
            if key not in consumed
            and not key.startswith(INTERNAL_PREFIX)
            and value is not None
            and not isinstance(value, Controller)
        }
        if extra:
            url = f"{url}?{urlencode(extra, doseq=True)}"

        return url

    def generate_with_query(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> str:
        """Generate a URL, merging extra query parameters in."""
        return self.generate(name, {**(parameters or {}), **(query or {})})

    def generate_multiple(
        self,
        routes_with_parameters: Mapping[str, Mapping[str, Any] | None],
    ) -> dict[str, str]:
        """
        Best-effort batch generation, e.g. for a navigation menu.
        Entries that fail to generate are left out.
        """
        urls: dict[str, str] = {}
        for name, parameters in routes_with_parameters.items():
            try:
                urls[name] = self.generate(name, parameters)
            except (UrlGenerationError, RoutingError) as exc:
                logger.debug("Skipping route %r: %s", name, exc)
        return urls
