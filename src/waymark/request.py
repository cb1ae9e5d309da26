"""
Request wrapper handed to route handlers.
"""

import json
from collections.abc import Mapping
from functools import cached_property
from typing import Any
from urllib.parse import parse_qs

from waymark.types import Parameters, Receive, Scope

# Default maximum request body size: 1 MB
DEFAULT_MAX_BODY_SIZE: int = 1_048_576


class Request:
    """
    HTTP Request wrapper.

    Exposes the ASGI scope together with the routing result: the
    matched route name and its parameters.
    """

    def __init__(
        self,
        scope: Scope,
        receive: Receive,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ) -> None:
        self._scope = scope
        self._receive = receive
        self._body: bytes | None = None
        self._max_body_size = max_body_size

    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self._scope.get("method", "GET")

    @property
    def path(self) -> str:
        return self._scope.get("path", "/")

    @property
    def query_string(self) -> str:
        return self._scope.get("query_string", b"").decode("utf-8")

    @cached_property
    def query_params(self) -> Mapping[str, str | list[str]]:
        """Parsed query parameters."""
        params: dict[str, str | list[str]] = {}
        for key, values in parse_qs(self.query_string, keep_blank_values=True).items():
            params[key] = values[0] if len(values) == 1 else values
        return params

    @cached_property
    def headers(self) -> Mapping[str, str]:
        headers: dict[str, str] = {}
        for name, value in self._scope.get("headers", []):
            headers[name.decode("latin-1").lower()] = value.decode("latin-1")
        return headers

    @property
    def client(self) -> tuple[str, int] | None:
        client = self._scope.get("client")
        if client:
            return (client[0], client[1])
        return None

    @property
    def app(self) -> Any:
        """Reference to the application instance."""
        return self._scope.get("app")

    @property
    def route(self) -> str | None:
        """Name of the matched route."""
        return self._scope.get("route")

    @property
    def path_params(self) -> Parameters:
        """Parameters extracted by the router, without internal keys."""
        return self._scope.get("path_params", {})

    def url_for(self, name: str, **params: Any) -> str:
        """Generate a URL through the application's router."""
        return self.app.url_for(name, **params)

    async def body(self) -> bytes:
        """
        Read and return the request body.

        Raises:
            BadRequest: If body exceeds max_body_size.
        """
        if self._body is not None:
            return self._body

        from waymark.exceptions import BadRequest

        chunks: list[bytes] = []
        total_size = 0
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                total_size += len(body)
                if self._max_body_size > 0 and total_size > self._max_body_size:
                    raise BadRequest(
                        f"Request body too large. "
                        f"Maximum allowed: {self._max_body_size} bytes"
                    )
                chunks.append(body)
            if not message.get("more_body", False):
                break

        self._body = b"".join(chunks)
        return self._body

    async def text(self) -> str:
        body = await self.body()
        return body.decode("utf-8")

    async def json(self) -> Any:
        """Parse body as JSON."""
        text = await self.text()
        return json.loads(text) if text else None

    def get_query(self, name: str, default: str | None = None) -> str | None:
        value = self.query_params.get(name, default)
        if isinstance(value, list):
            return value[0] if value else default
        return value
