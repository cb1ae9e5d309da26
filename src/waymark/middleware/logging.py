"""
Request logging middleware.
"""

import logging
import time
from typing import Any

from waymark.middleware.base import Middleware
from waymark.types import ASGIApp, Receive, Scope, Send


class RequestLoggingMiddleware(Middleware):
    """
    Logs every request with its status code, duration and the name of
    the route it was dispatched to.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: logging.Logger | None = None,
        log_level: int | None = None,
    ) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("waymark.access")
        self._log_level = log_level or logging.INFO

    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        start_time = time.perf_counter()
        status_code = 0

        async def capture_send(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, capture_send)
        finally:
            duration = (time.perf_counter() - start_time) * 1000
            self._logger.log(
                self._log_level,
                "%s %s %d %.2fms route=%s request_id=%s",
                scope.get("method", "GET"),
                scope.get("path", "/"),
                status_code,
                duration,
                scope.get("route") or "-",
                scope.get("request_id", "-"),
            )
