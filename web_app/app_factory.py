"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from .api import api_router
from .web import web_router
from .middleware.auth import AuthMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.timeout import TimeoutMiddleware


# Responses smaller than this are sent uncompressed.
GZIP_MINIMUM_SIZE = 1400


def create_app(
    service_instance,
    config,
    logger: logging.Logger = None,
) -> FastAPI:
    """Create and configure FastAPI application.
    
    Args:
        service_instance: Service instance (None when set later by the lifespan)
        config: Configuration instance
        logger: Optional logger for the web layer
        
    Returns:
        Configured FastAPI app
    """
    logger = logger or logging.getLogger("shortener.web")
    
    app = FastAPI(
        title="URL Shortener",
        description="URL shortening service with per-user links and pluggable storage",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    
    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.config = config
    
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Bad Request"},
        )
    
    # Last added runs first: logging, timeout, gzip, auth, routes.
    app.add_middleware(
        AuthMiddleware,
        secret=config.cookie_secret,
        exempt_paths={"/api/internal/stats"},
    )
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)
    app.add_middleware(TimeoutMiddleware, timeout=config.timeout)
    app.add_middleware(LoggingMiddleware)
    
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])
    
    return app
