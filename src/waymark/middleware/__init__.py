"""
Middleware package for Waymark.
"""

from waymark.middleware.base import Middleware, MiddlewareStack
from waymark.middleware.error_handler import ErrorHandlerMiddleware
from waymark.middleware.logging import RequestLoggingMiddleware

__all__ = [
    "Middleware",
    "MiddlewareStack",
    "ErrorHandlerMiddleware",
    "RequestLoggingMiddleware",
]
