"""
Waymark - URL routing for Python web applications

Compiles path templates with placeholders, defaults, requirements and
method restrictions into matchers, resolves requests to named routes,
and generates URLs back from route names.
"""

from waymark.app import Waymark
from waymark.collection import RouteCollection
from waymark.exceptions import (
    DuplicateRouteName,
    InvalidParameter,
    MethodNotAllowed,
    MissingMandatoryParameters,
    RouteCompilationError,
    RouteNotFound,
    RoutingError,
    UnknownRoute,
    UrlGenerationError,
)
from waymark.generator import UrlGenerator
from waymark.matcher import UrlMatcher
from waymark.request import Request
from waymark.response import JSONResponse, RedirectResponse, Response, TextResponse
from waymark.route import CompiledRoute, Route
from waymark.routing import Router
from waymark.types import Controller

__version__ = "0.1.0"
__all__ = [
    "Waymark",
    "Request",
    "Response",
    "JSONResponse",
    "TextResponse",
    "RedirectResponse",
    "Router",
    "Route",
    "CompiledRoute",
    "RouteCollection",
    "UrlMatcher",
    "UrlGenerator",
    "Controller",
    "RoutingError",
    "RouteCompilationError",
    "DuplicateRouteName",
    "RouteNotFound",
    "MethodNotAllowed",
    "UrlGenerationError",
    "UnknownRoute",
    "MissingMandatoryParameters",
    "InvalidParameter",
]
