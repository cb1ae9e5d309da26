"""
Error handling middleware.
"""

import logging
import uuid
from typing import Any

from waymark.exceptions import HTTPException, MethodNotAllowed
from waymark.middleware.base import Middleware
from waymark.response import JSONResponse
from waymark.types import ASGIApp, Receive, Scope, Send


class ErrorHandlerMiddleware(Middleware):
    """
    Turns exceptions into JSON error responses.

    Routing failures keep their status: 404 for an unknown path, 405
    with an ``Allow`` header for a known path under the wrong method,
    400 for URL generation errors. Anything else becomes an opaque 500;
    the traceback is only logged server-side.
    """

    def __init__(
        self,
        app: ASGIApp,
        debug: bool = False,
    ) -> None:
        super().__init__(app)
        self.debug = debug
        self._logger = logging.getLogger("waymark.errors")

    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        request_id = str(uuid.uuid4())
        scope["request_id"] = request_id

        async def send_with_request_id(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except HTTPException as exc:
            if exc.status_code >= 500:
                self._logger.error(
                    "request_id=%s status=%d detail=%s",
                    request_id, exc.status_code, exc.detail,
                    exc_info=True,
                )
            else:
                self._logger.warning(
                    "request_id=%s status=%d detail=%s",
                    request_id, exc.status_code, exc.detail,
                )
            content: dict[str, Any] = {
                "error": exc.detail,
                "status_code": exc.status_code,
                "request_id": request_id,
            }
            if isinstance(exc, MethodNotAllowed):
                content["allowed_methods"] = list(exc.allowed_methods)
            response = JSONResponse(
                content=content,
                status_code=exc.status_code,
                headers=exc.headers,
            )
            await response(send_with_request_id)
        except Exception as exc:
            self._logger.exception(
                "Unhandled exception request_id=%s: %s",
                request_id, exc,
            )
            response = JSONResponse(
                content={
                    "error": "Internal Server Error",
                    "status_code": 500,
                    "request_id": request_id,
                },
                status_code=500,
            )
            await response(send_with_request_id)
