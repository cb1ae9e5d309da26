"""
Waymark ASGI application.
Dispatches HTTP requests through the router to the matched controller.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from waymark.exceptions import InternalServerError
from waymark.middleware import ErrorHandlerMiddleware, Middleware, MiddlewareStack
from waymark.request import Request
from waymark.response import JSONResponse, RedirectResponse, Response, TextResponse
from waymark.route import Route
from waymark.routing import Router
from waymark.types import (
    ASGIApp,
    CONTROLLER_KEY,
    INTERNAL_PREFIX,
    ROUTE_KEY,
    Controller,
    ParamValue,
    Receive,
    RouteHandler,
    Scope,
    Send,
)

logger = logging.getLogger("waymark.app")


class Waymark:
    """
    HTTP kernel around a :class:`Router`.

    Every route names its handler through the ``_controller`` default.
    The kernel matches the request, pops the controller out of the
    parameters and calls it with the remaining public parameters.

    Usage:
        app = Waymark()

        @app.get("article_show", "/article/{id}", requirements={"id": r"\\d+"})
        async def show(request, id):
            return {"id": id, "self": request.url_for("article_show", id=id)}

        # Run with: uvicorn main:app
    """

    def __init__(
        self,
        router: Router | None = None,
        debug: bool = False,
        title: str = "Waymark",
    ) -> None:
        self.debug = debug
        self.title = title

        self._router = router if router is not None else Router()
        self._middleware_stack = MiddlewareStack(self._handle_request)
        self._middleware_stack.add(ErrorHandlerMiddleware, debug=debug)
        self._app: ASGIApp | None = None

    # -------------------------------------------------------------------------
    # ASGI Interface
    # -------------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        scope["app"] = self

        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await self._get_app()(scope, receive, send)

    def _get_app(self) -> ASGIApp:
        if self._app is None:
            self._router.warm_up()
            self._app = self._middleware_stack.build()
        return self._app

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Compile routes on startup; nothing to release on shutdown."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._get_app()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _handle_request(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Handle an incoming HTTP request."""
        request = Request(scope, receive)

        parameters = self._router.match(request.path, request.method)
        scope["route"] = parameters.pop(ROUTE_KEY)
        controller = parameters.pop(CONTROLLER_KEY, None)
        if not isinstance(controller, Controller):
            raise InternalServerError(f"Route {scope['route']!r} has no controller")

        path_params = {
            key: value
            for key, value in parameters.items()
            if not key.startswith(INTERNAL_PREFIX)
        }
        scope["path_params"] = path_params

        handler = controller.resolve()
        response = handler(request, **path_params)
        if inspect.isawaitable(response):
            response = await response

        await self._to_response(response)(send)

    @staticmethod
    def _to_response(result: Any) -> Response:
        if isinstance(result, Response):
            return result
        if isinstance(result, (dict, list)):
            return JSONResponse(result)
        if isinstance(result, str):
            return TextResponse(result)
        if result is None:
            return TextResponse("", status_code=204)
        return JSONResponse(result)

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    @property
    def router(self) -> Router:
        return self._router

    def add_route(
        self,
        name: str,
        path: str,
        handler: RouteHandler | str,
        methods: list[str] | None = None,
        defaults: Mapping[str, ParamValue] | None = None,
        requirements: Mapping[str, str] | None = None,
    ) -> Route:
        """Add a named route dispatching to ``handler``."""
        return self._router.add_route(
            name,
            path,
            handler=handler,
            methods=methods,
            defaults=defaults,
            requirements=requirements,
        )

    def route(
        self,
        name: str,
        path: str,
        methods: list[str] | None = None,
        defaults: Mapping[str, ParamValue] | None = None,
        requirements: Mapping[str, str] | None = None,
    ) -> Callable[[RouteHandler], RouteHandler]:
        """Decorator for routes with custom methods."""
        def decorator(handler: RouteHandler) -> RouteHandler:
            self.add_route(name, path, handler, methods, defaults, requirements)
            return handler
        return decorator

    def get(self, name: str, path: str, **options: Any) -> Callable[[RouteHandler], RouteHandler]:
        return self.route(name, path, methods=["GET"], **options)

    def post(self, name: str, path: str, **options: Any) -> Callable[[RouteHandler], RouteHandler]:
        return self.route(name, path, methods=["POST"], **options)

    def put(self, name: str, path: str, **options: Any) -> Callable[[RouteHandler], RouteHandler]:
        return self.route(name, path, methods=["PUT"], **options)

    def patch(self, name: str, path: str, **options: Any) -> Callable[[RouteHandler], RouteHandler]:
        return self.route(name, path, methods=["PATCH"], **options)

    def delete(self, name: str, path: str, **options: Any) -> Callable[[RouteHandler], RouteHandler]:
        return self.route(name, path, methods=["DELETE"], **options)

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    def add_middleware(
        self,
        middleware_class: type[Middleware] | Callable[..., ASGIApp],
        **options: Any,
    ) -> None:
        self._middleware_stack.add(middleware_class, **options)
        self._app = None

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    def url_for(self, name: str, **params: Any) -> str:
        """
        Generate a URL for a named route.

        Raises:
            UnknownRoute, MissingMandatoryParameters, InvalidParameter
        """
        return self._router.generate(name, params)

    def redirect_to(self, name: str, status_code: int = 302, **params: Any) -> RedirectResponse:
        return RedirectResponse(self.url_for(name, **params), status_code=status_code)

    def run(
        self,
        host: str = "localhost",
        port: int = 8000,
        reload: bool = False,
        workers: int = 1,
        log_level: str = "info",
    ) -> None:
        """Run the application using uvicorn."""
        import uvicorn

        uvicorn.run(
            self,
            host=host,
            port=port,
            reload=reload,
            workers=workers,
            log_level=log_level,
        )
