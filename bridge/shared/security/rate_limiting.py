"""
Rate limiting configuration and setup.

Uses slowapi to enforce a default per-client limit on every route.
Exceeded limits are reported through the error taxonomy as RATE_LIMIT.
"""

from typing import Callable, Protocol

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from bridge.shared.errors.taxonomy import AppError

DEFAULT_RATE_LIMIT = "60/minute"


class _ErrorResponder(Protocol):
    def handle(self, request: Request, error: object) -> JSONResponse: ...


def build_limiter(default_limit: str = DEFAULT_RATE_LIMIT, enabled: bool = True) -> Limiter:
    """Create a limiter keyed on the client address.

    Args:
        default_limit: Limit applied to every route, e.g. ``"60/minute"``.
        enabled: Switch limiting off entirely, e.g. behind a gateway.

    Returns:
        A fresh limiter with its own in-memory storage.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[default_limit],
        enabled=enabled,
    )


def build_rate_limit_handler(
    error_handler: _ErrorResponder,
) -> Callable[[Request, RateLimitExceeded], JSONResponse]:
    """Build the RateLimitExceeded handler.

    The handler is synchronous because slowapi's middleware calls it
    directly.
    """

    def rate_limit_exceeded_handler(
        request: Request, _exc: RateLimitExceeded
    ) -> JSONResponse:
        return error_handler.handle(request, AppError.rate_limit())

    return rate_limit_exceeded_handler
