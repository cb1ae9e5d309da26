"""
Waymark exceptions.
Each exception handles one kind of routing failure so the HTTP layer
can tell them apart.
"""

from collections.abc import Iterable
from typing import Any


class WaymarkException(Exception):
    """Base exception for all Waymark errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class HTTPException(WaymarkException):
    """HTTP-related exceptions with status codes."""

    def __init__(
        self,
        status_code: int = 500,
        detail: str = "Internal Server Error",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.headers = headers or {}
        super().__init__(detail)


class BadRequest(HTTPException):
    """400 Bad Request."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(400, detail)


class NotFound(HTTPException):
    """404 Not Found."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(404, detail)


class RouteNotFound(NotFound):
    """404: no route pattern matches the path under any method."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'No route found for "{path}"')


class MethodNotAllowed(HTTPException):
    """
    405: the path matches at least one route, but not with this method.

    Carries the methods that would have matched and exposes them in
    the ``Allow`` header.
    """

    def __init__(self, allowed_methods: Iterable[str], detail: str = "") -> None:
        self.allowed_methods: tuple[str, ...] = tuple(sorted(set(allowed_methods)))
        allow_value = ", ".join(self.allowed_methods)
        super().__init__(
            405,
            detail or f"Method not allowed. Allowed methods: {allow_value}",
            {"Allow": allow_value},
        )


class InternalServerError(HTTPException):
    """500 Internal Server Error."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(500, detail)


class UrlGenerationError(BadRequest):
    """Base for errors raised while building a URL from a route name."""


class UnknownRoute(UrlGenerationError):
    """URL generation requested for a name absent from the collection."""

    def __init__(self, route_name: str) -> None:
        self.route_name = route_name
        super().__init__(f'Route "{route_name}" does not exist.')


class MissingMandatoryParameters(UrlGenerationError):
    """One or more placeholders without a default received no value."""

    def __init__(self, route_name: str, missing: Iterable[str]) -> None:
        self.route_name = route_name
        self.missing: list[str] = list(missing)
        super().__init__(
            f'Route "{route_name}" requires parameters: {", ".join(self.missing)}'
        )


class InvalidParameter(UrlGenerationError):
    """A supplied value does not satisfy the placeholder's requirement."""

    def __init__(
        self,
        route_name: str,
        parameter: str,
        requirement: str,
        value: Any,
    ) -> None:
        self.route_name = route_name
        self.parameter = parameter
        self.requirement = requirement
        self.value = value
        super().__init__(
            f'Parameter "{parameter}" for route "{route_name}" must match '
            f'"{requirement}", "{value}" given.'
        )


class RoutingError(WaymarkException):
    """Route definition and collection errors."""
    pass


class DuplicateRouteName(RoutingError):
    """A route with the same name already exists in the collection."""

    def __init__(self, route_name: str, hint: str = "") -> None:
        self.route_name = route_name
        message = f'Route "{route_name}" already exists in the collection.'
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class RouteCompilationError(RoutingError):
    """A path template cannot be compiled into a matcher."""
    pass
