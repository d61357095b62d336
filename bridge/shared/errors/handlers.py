"""
Centralized error handling for FastAPI.

Every raised value ends up in ``ErrorHandler.handle``: it is logged with
its request context, classified against the taxonomy and written as one
JSON response. Tracebacks reach the client only when the handler is built
with ``include_stack=True``.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from bridge.shared.errors.taxonomy import (
    AppError,
    ErrorClassification,
    classify_error,
)
from bridge.shared.errors.validation import (
    ValidationFailure,
    raise_for_validation_failures,
)
from bridge.shared.security.middleware import RequestRejected
from bridge.shared.security.rate_limiting import build_rate_limit_handler

logger = logging.getLogger(__name__)

HTTP_404 = 404
HTTP_405 = 405
ROUTE_MISS_STATUSES = frozenset({HTTP_404, HTTP_405})
ROUTE_NOT_FOUND_CODE = "ROUTE_NOT_FOUND"
ROUTE_NOT_FOUND_MESSAGE = "Route not found"


def _error_body(
    status_code: int, code: str, message: str, stack: str | None = None
) -> dict[str, dict[str, Any]]:
    """Build the ``{"error": {...}}`` wire body."""
    error: dict[str, Any] = {
        "message": message,
        "code": code,
        "statusCode": status_code,
    }
    if stack is not None:
        error["stack"] = stack
    return {"error": error}


_STATUS_ERRORS = {
    400: AppError.validation,
    401: AppError.unauthorized,
    403: AppError.forbidden,
    409: AppError.conflict,
    429: AppError.rate_limit,
    503: AppError.service_unavailable,
}


def error_from_http_exception(exc: StarletteHTTPException) -> AppError:
    """Map a framework HTTP exception onto the taxonomy.

    Statuses without a kind of their own become VALIDATION for 4xx and
    INTERNAL otherwise.
    """
    build = _STATUS_ERRORS.get(exc.status_code)
    if build is None:
        build = AppError.validation if 400 <= exc.status_code < 500 else AppError.internal
    return build(str(exc.detail))


def request_context(request: Request) -> dict[str, Any]:
    """Collect the request fields attached to every error log record."""
    user = getattr(request.state, "user", None)
    return {
        "url": str(request.url),
        "method": request.method,
        "ip": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
        "user_id": getattr(user, "id", None),
    }


class ErrorHandler:
    """Single normalization point for errors raised while serving a request.

    Args:
        include_stack: Add the formatted traceback to responses for real
            exceptions. Only meant for development.
        sink: Logger receiving error records. Defaults to this module's logger.
    """

    def __init__(
        self, include_stack: bool = False, sink: logging.Logger | None = None
    ) -> None:
        self.include_stack = include_stack
        self._logger = sink or logger

    def handle(self, request: Request, error: Any) -> JSONResponse:
        """Log, classify and respond. Never raises."""
        context = request_context(request)
        context["error"] = error
        self._logger.error(
            "Unhandled error occurred",
            extra={"context": context},
            exc_info=error if isinstance(error, BaseException) else None,
        )

        classification = classify_error(error)
        stack = None
        if self.include_stack and isinstance(error, BaseException):
            stack = "".join(traceback.format_exception(error))
        return self._render(classification, stack)

    def route_not_found(self, request: Request) -> JSONResponse:
        """Respond to a request that matched no route."""
        self._logger.warning(
            "Route not found",
            extra={"context": {"url": str(request.url), "method": request.method}},
        )
        return JSONResponse(
            status_code=HTTP_404,
            content=_error_body(HTTP_404, ROUTE_NOT_FOUND_CODE, ROUTE_NOT_FOUND_MESSAGE),
        )

    def _render(
        self, classification: ErrorClassification, stack: str | None
    ) -> JSONResponse:
        body = _error_body(
            classification.status_code,
            classification.code,
            str(classification.message),
            stack,
        )
        return JSONResponse(status_code=classification.status_code, content=body)


def register_error_handlers(app: FastAPI, error_handler: ErrorHandler) -> None:
    """Register all error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
        error_handler: The handler every registered callback delegates to.
    """

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Route and method misses get the fixed not-found body; the rest is mapped."""
        if exc.status_code in ROUTE_MISS_STATUSES:
            return error_handler.route_not_found(request)
        return error_handler.handle(request, error_from_http_exception(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Feed framework validation failures through the validation adapter."""
        failures = [
            ValidationFailure(path=tuple(err.get("loc", ())), message=err.get("msg"))
            for err in exc.errors()
        ]
        try:
            raise_for_validation_failures(failures)
        except AppError as error:
            return error_handler.handle(request, error)
        return error_handler.handle(request, AppError.validation())

    @app.exception_handler(RequestRejected)
    async def handle_request_rejected(
        request: Request, exc: RequestRejected
    ) -> JSONResponse:
        """Sanitization refused part of the request."""
        logger.warning("%s: %s %s", exc.message, request.method, request.url.path)
        return exc.to_response()

    app.add_exception_handler(RateLimitExceeded, build_rate_limit_handler(error_handler))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Last resort for anything that got past the error boundary."""
        return error_handler.handle(request, exc)
