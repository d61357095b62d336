"""
Async error boundary.

Forwards every exception raised by an async request handler to the
``ErrorHandler`` so that a failed coroutine always produces a response
instead of escaping the request.
"""

import functools
from typing import Any, Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from bridge.shared.errors.handlers import ErrorHandler

AsyncRequestHandler = Callable[..., Awaitable[Any]]


def async_handler(
    error_handler: ErrorHandler,
) -> Callable[[AsyncRequestHandler], AsyncRequestHandler]:
    """Wrap ``async def fn(request, ...)`` so failures reach ``error_handler``.

    The wrapper does not classify anything itself. Task cancellation is
    left alone.
    """

    def decorator(fn: AsyncRequestHandler) -> AsyncRequestHandler:
        @functools.wraps(fn)
        async def wrapper(request: Request, *args: Any, **kwargs: Any) -> Any:
            try:
                return await fn(request, *args, **kwargs)
            except Exception as exc:
                return error_handler.handle(request, exc)

        return wrapper

    return decorator


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Applies ``async_handler`` around the rest of the application.

    Placed outside the routers, it covers every route without per-route
    decoration.
    """

    def __init__(self, app: ASGIApp, error_handler: ErrorHandler) -> None:
        super().__init__(app)
        self._guarded = async_handler(error_handler)(self._forward)

    @staticmethod
    async def _forward(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        return await call_next(request)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Run the downstream app, converting any exception into a response."""
        return await self._guarded(request, call_next)
