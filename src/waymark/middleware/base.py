"""
Base middleware classes for Waymark.
Each middleware wraps the next ASGI app in the chain.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from waymark.types import ASGIApp, Receive, Scope, Send


class Middleware(ABC):
    """
    Abstract base middleware class.

    Only HTTP scopes reach :meth:`process`; anything else (lifespan
    events, for instance) is passed straight to the wrapped app.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        await self.process(scope, receive, send)

    @abstractmethod
    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process the request. Must be implemented by subclasses."""
        ...


class MiddlewareStack:
    """Ordered list of middleware wrapped around the dispatching app."""

    def __init__(self, app: ASGIApp) -> None:
        self._app = app
        self._entries: list[tuple[type[Middleware] | Callable[..., ASGIApp], dict[str, Any]]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def add(
        self,
        middleware_class: type[Middleware] | Callable[..., ASGIApp],
        **options: Any,
    ) -> None:
        self._entries.append((middleware_class, options))

    def build(self) -> ASGIApp:
        """Build the middleware chain. The first added is outermost."""
        app = self._app
        for middleware_class, options in reversed(self._entries):
            app = middleware_class(app, **options)
        return app
