"""
Application entry point.

Creates the FastAPI application and wires together the request-safety
pipeline, outermost first:
- Security headers
- Error boundary (every exception becomes a taxonomy response)
- Rate limiting
- Request sanitization (query, JSON body, path parameters)
- Error handlers (route misses, framework validation, rate limits)

No business logic belongs here. Consuming services include their own
routers on the returned application.
"""

from fastapi import Depends, FastAPI
from slowapi.middleware import SlowAPIMiddleware

from bridge.core.config import Settings, settings as default_settings
from bridge.interfaces.health import router as health_router
from bridge.shared.errors.boundary import ErrorBoundaryMiddleware
from bridge.shared.errors.handlers import ErrorHandler, register_error_handlers
from bridge.shared.logging import configure_logging
from bridge.shared.security.headers import SecurityHeadersMiddleware
from bridge.shared.security.middleware import (
    SanitizationMiddleware,
    sanitize_path_params,
)
from bridge.shared.security.rate_limiting import build_limiter


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the composition root of the application.

    Args:
        settings: Configuration to build from. Defaults to the settings
            loaded from the environment.

    Returns:
        A fully configured FastAPI application instance.
    """
    settings = settings or default_settings
    configure_logging(level=settings.log_level)

    debug = settings.include_error_stack
    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if debug else None,
        redoc_url="/redoc" if debug else None,
        dependencies=[Depends(sanitize_path_params)],
    )

    error_handler = ErrorHandler(include_stack=settings.include_error_stack)
    app.state.error_handler = error_handler

    # --- Rate Limiting ---
    app.state.limiter = build_limiter(
        settings.rate_limit_default, enabled=settings.rate_limit_enabled
    )

    # --- Error Handlers ---
    register_error_handlers(app, error_handler)

    # --- Middleware (last added runs first) ---
    app.add_middleware(SanitizationMiddleware, max_depth=settings.sanitize_max_depth)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(ErrorBoundaryMiddleware, error_handler=error_handler)
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")

    return app


app = create_app()
