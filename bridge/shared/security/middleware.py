"""
Request sanitization middleware.

Runs the sanitization engine over the query string and JSON body before
routing, and over path parameters once routing has matched them. A value
that cannot be sanitized is rejected with a 400 and never reaches the
route.
"""

import json
import logging
from urllib.parse import parse_qsl, urlencode

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bridge.shared.security.sanitization import (
    DEFAULT_MAX_DEPTH,
    SanitizationDepthError,
    SanitizationError,
    sanitize_object,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
INVALID_BODY = "Invalid request body"
INVALID_QUERY = "Invalid query parameters"
INVALID_PARAMS = "Invalid route parameters"


class RequestRejected(Exception):
    """Raised when part of a request is refused by sanitization."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=HTTP_400, content={"error": self.message})


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class SanitizationMiddleware:
    """Sanitize the query string and JSON body of every HTTP request."""

    def __init__(self, app: ASGIApp, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.app = app
        self.max_depth = max_depth

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            self._sanitize_query(scope)
        except SanitizationError:
            await self._reject(scope, receive, send, INVALID_QUERY)
            return

        headers = MutableHeaders(scope=scope)
        if not _is_json(headers.get("content-type", "")):
            await self.app(scope, receive, send)
            return

        body = await self._read_body(receive)
        try:
            body = self._sanitize_body(body)
        except SanitizationError:
            await self._reject(scope, receive, send, INVALID_BODY)
            return
        headers["content-length"] = str(len(body))

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    def _sanitize_query(self, scope: Scope) -> None:
        raw = scope.get("query_string", b"")
        if not raw:
            return
        pairs = parse_qsl(raw.decode("latin-1"), keep_blank_values=True)
        values = sanitize_object([value for _, value in pairs], self.max_depth)
        cleaned = [(key, value) for (key, _), value in zip(pairs, values)]
        scope["query_string"] = urlencode(cleaned).encode("latin-1")

    def _sanitize_body(self, body: bytes) -> bytes:
        if not body:
            return body
        try:
            payload = json.loads(body)
        except RecursionError:
            raise SanitizationDepthError(self.max_depth) from None
        except ValueError:
            # Malformed JSON is left for the framework's own validation.
            return body
        return json.dumps(sanitize_object(payload, self.max_depth)).encode("utf-8")

    @staticmethod
    async def _read_body(receive: Receive) -> bytes:
        chunks = []
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)
        return b"".join(chunks)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send, reason: str) -> None:
        logger.warning("%s: %s %s", reason, scope.get("method"), scope.get("path"))
        await RequestRejected(reason).to_response()(scope, receive, send)


def sanitize_path_params(request: Request) -> None:
    """App-level dependency replacing matched path parameters with sanitized ones.

    Raises:
        RequestRejected: If the parameters cannot be sanitized.
    """
    params = request.scope.get("path_params")
    if not params:
        return
    try:
        request.scope["path_params"] = sanitize_object(dict(params))
    except SanitizationError:
        raise RequestRejected(INVALID_PARAMS) from None
