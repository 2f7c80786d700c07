"""
A11y Announcer - Main Application
=================================

FastAPI application entry point for the announcement bridge.

This module sets up:
- FastAPI application with optional CORS
- Route registration
- Middleware (logging, error handling)
- Lifespan management: the AccessibilityService and its background tasks

Usage:
    # Development
    uvicorn a11y_announcer.main:app --reload --port 8765

    # Console script
    a11y-announcer
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from a11y_announcer import __version__
from a11y_announcer.api.routes import announcements_router, health_router, modes_router
from a11y_announcer.config import get_settings
from a11y_announcer.service import AccessibilityService
from a11y_announcer.utils.logger import get_logger, setup_logging

# Setup logging
settings = get_settings()
setup_logging(
    level=settings.server.log_level,
    json_logs=not settings.server.debug,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Starts the accessibility service (queue drain and tick loop) and stops
    it on shutdown. A service already placed on ``app.state`` is used as is.
    """
    # Startup
    logger.info(
        "Starting A11y Announcer",
        version=__version__,
        environment=settings.server.environment,
    )

    service = getattr(app.state, "service", None)
    if service is None:
        service = AccessibilityService(settings)
    await service.start()
    app.state.service = service

    yield

    # Shutdown
    logger.info("Shutting down A11y Announcer")
    await service.stop()


# Create FastAPI application
app = FastAPI(
    title="A11y Announcer",
    description=(
        "Screen-reader announcement pipeline for applications without native "
        "accessibility. Cleans text, suppresses duplicates, and routes it to "
        "speech or a paced clipboard queue."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.server.debug else None,
    redoc_url="/redoc" if settings.server.debug else None,
    openapi_url="/openapi.json" if settings.server.debug else None,
)


# CORS middleware
if settings.server.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()

    request_id = request.headers.get("X-Request-ID", str(time.time()))

    logger.debug(
        "Request started",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    logger.info(
        "Request completed",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.exception(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.server.debug else "An unexpected error occurred",
        },
    )


# Register routers
app.include_router(health_router)
app.include_router(announcements_router)
app.include_router(modes_router)


# Root endpoint
@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint with service information."""
    return {
        "service": "A11y Announcer",
        "version": __version__,
        "docs": "/docs" if settings.server.debug else None,
        "health": "/health",
    }


def main() -> None:
    """Run the bridge with uvicorn."""
    import uvicorn

    uvicorn.run(
        "a11y_announcer.main:app",
        host=settings.server.server_host,
        port=settings.server.server_port,
        reload=False,
        log_level=settings.server.log_level.lower(),
    )


# Run directly (for development)
if __name__ == "__main__":
    main()
