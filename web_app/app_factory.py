"""FastAPI application factory."""

import time

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from .api import api_router
from .api.routes import request_validation_error
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware
from .web import web_router


def create_app(service_instance, config, lifespan=None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service_instance: Link service (may be None when ``lifespan`` sets it)
        config: Configuration instance
        lifespan: Optional lifespan context that builds the service

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="SNIP",
        description="URL shortening with click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.config = config
    app.state.started_at = time.monotonic()

    # Malformed input is a 400 like every other validation failure
    app.add_exception_handler(RequestValidationError, request_validation_error)

    app.add_middleware(ForwardedHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)

    # API first so /api/* is never taken for a short code
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
