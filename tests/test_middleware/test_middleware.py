"""Tests for waymark.middleware: ErrorHandler, Logging, stack ordering."""

import json
import logging

import pytest

from waymark.exceptions import BadRequest, InvalidParameter, MethodNotAllowed, RouteNotFound
from waymark.middleware import (
    ErrorHandlerMiddleware,
    Middleware,
    MiddlewareStack,
    RequestLoggingMiddleware,
)

from tests.conftest import ResponseCapture, make_receive, make_scope


# ---------------------------------------------------------------------------
# ErrorHandlerMiddleware
# ---------------------------------------------------------------------------

class TestErrorHandlerMiddleware:
    @pytest.mark.asyncio
    async def test_catches_http_exception(self) -> None:
        async def app(scope, receive, send):
            raise BadRequest("oops")

        mw = ErrorHandlerMiddleware(app, debug=False)
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)

        assert cap.status == 400
        body = json.loads(cap.body)
        assert body["error"] == "oops"
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_route_not_found(self) -> None:
        async def app(scope, receive, send):
            raise RouteNotFound(scope["path"])

        mw = ErrorHandlerMiddleware(app)
        cap = ResponseCapture()
        await mw(make_scope(path="/missing"), make_receive(), cap)

        assert cap.status == 404
        assert json.loads(cap.body)["error"] == 'No route found for "/missing"'

    @pytest.mark.asyncio
    async def test_method_not_allowed(self) -> None:
        async def app(scope, receive, send):
            raise MethodNotAllowed(["PUT", "POST", "PUT"])

        mw = ErrorHandlerMiddleware(app)
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)

        assert cap.status == 405
        assert cap.headers["allow"] == "POST, PUT"
        body = json.loads(cap.body)
        assert body["allowed_methods"] == ["POST", "PUT"]
        assert body["status_code"] == 405

    @pytest.mark.asyncio
    async def test_generation_error_is_bad_request(self) -> None:
        async def app(scope, receive, send):
            raise InvalidParameter("article_show", "id", r"\d+", "abc")

        mw = ErrorHandlerMiddleware(app)
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)

        assert cap.status == 400
        assert '"id"' in json.loads(cap.body)["error"]

    @pytest.mark.asyncio
    async def test_never_leaks_internal_details(self) -> None:
        async def app(scope, receive, send):
            raise RuntimeError("secret database password 1234")

        mw = ErrorHandlerMiddleware(app, debug=True)  # debug=True on purpose
        cap = ResponseCapture()
        await mw(make_scope(), make_receive(), cap)

        assert cap.status == 500
        body = json.loads(cap.body)
        assert "secret" not in body["error"]
        assert body["error"] == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_injects_request_id_header(self) -> None:
        async def app(scope, receive, send):
            await send({"type": "http.response.start", "status": 200, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        mw = ErrorHandlerMiddleware(app)
        cap = ResponseCapture()
        scope = make_scope()
        await mw(scope, make_receive(), cap)

        assert cap.headers["x-request-id"] == scope["request_id"]

    @pytest.mark.asyncio
    async def test_client_errors_logged_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        async def app(scope, receive, send):
            raise RouteNotFound("/missing")

        mw = ErrorHandlerMiddleware(app)
        with caplog.at_level(logging.WARNING, logger="waymark.errors"):
            await mw(make_scope(), make_receive(), ResponseCapture())

        records = [r for r in caplog.records if r.name == "waymark.errors"]
        assert [r.levelno for r in records] == [logging.WARNING]


# ---------------------------------------------------------------------------
# RequestLoggingMiddleware
# ---------------------------------------------------------------------------

class TestRequestLoggingMiddleware:
    @pytest.mark.asyncio
    async def test_logs_request_with_route_name(self, caplog: pytest.LogCaptureFixture) -> None:
        async def app(scope, receive, send):
            scope["route"] = "article_show"
            await send({"type": "http.response.start", "status": 200, "headers": []})
            await send({"type": "http.response.body", "body": b"ok"})

        mw = RequestLoggingMiddleware(app)
        with caplog.at_level(logging.INFO, logger="waymark.access"):
            await mw(make_scope(path="/article/42"), make_receive(), ResponseCapture())

        assert "GET /article/42 200" in caplog.text
        assert "route=article_show" in caplog.text

    @pytest.mark.asyncio
    async def test_logs_unrouted_request(self, caplog: pytest.LogCaptureFixture) -> None:
        async def app(scope, receive, send):
            await send({"type": "http.response.start", "status": 404, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        mw = RequestLoggingMiddleware(app)
        with caplog.at_level(logging.INFO, logger="waymark.access"):
            await mw(make_scope(path="/nowhere"), make_receive(), ResponseCapture())

        assert "route=-" in caplog.text


# ---------------------------------------------------------------------------
# MiddlewareStack
# ---------------------------------------------------------------------------

class _Tag(Middleware):
    def __init__(self, app, tag: str) -> None:
        super().__init__(app)
        self.tag = tag

    async def process(self, scope, receive, send) -> None:
        scope.setdefault("trail", []).append(self.tag)
        await self.app(scope, receive, send)


class TestMiddlewareStack:
    @pytest.mark.asyncio
    async def test_first_added_is_outermost(self) -> None:
        async def app(scope, receive, send):
            scope["trail"].append("app")

        stack = MiddlewareStack(app)
        stack.add(_Tag, tag="outer")
        stack.add(_Tag, tag="inner")
        assert len(stack) == 2

        scope = make_scope()
        await stack.build()(scope, make_receive(), ResponseCapture())
        assert scope["trail"] == ["outer", "inner", "app"]
