"""FastAPI application entry point.

This module initializes the FastAPI application with middleware,
routers, error mapping and core endpoints.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wheeltracker.server import __version__
from wheeltracker.server.api.v1.router import router as v1_router
from wheeltracker.server.config import settings
from wheeltracker.server.database.session import create_tables
from wheeltracker.server.models.common import ErrorResponse, HealthResponse
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.exceptions import (
    ExternalProviderError,
    InsufficientLotError,
    InvariantViolation,
    NotFoundError,
    StaleSignalError,
    ValidationError,
    WheelTrackerError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# HTTP status per domain error; subclasses are checked in order
ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InsufficientLotError, status.HTTP_409_CONFLICT),
    (StaleSignalError, status.HTTP_409_CONFLICT),
    (InvariantViolation, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ExternalProviderError, status.HTTP_502_BAD_GATEWAY),
]

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Backend API for options wheel bookkeeping and allocation tracking",
    version=__version__,
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Configure CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(v1_router)


@app.on_event("startup")
async def startup_event():
    """Application startup event handler.

    Logs configuration and makes sure the schema exists.
    """
    logger.info(f"Starting {settings.app_name} v{__version__}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Database path: {settings.database_path}")
    create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event handler."""
    logger.info(f"Shutting down {settings.app_name}")


@app.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["health"],
    summary="Health check endpoint",
    description="Returns service health status",
)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Example:
        >>> GET /health
        >>> {"status": "healthy", "timestamp": "2026-02-01T10:00:00"}
    """
    return HealthResponse(status="healthy", timestamp=utcnow())


@app.get(
    "/",
    status_code=status.HTTP_200_OK,
    tags=["root"],
    summary="Root endpoint",
    description="Returns welcome message with API information",
)
async def root():
    """Root endpoint.

    Provides basic API information and links to documentation.
    """
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "api": "/api/v1/info",
    }


# Error handlers
@app.exception_handler(WheelTrackerError)
async def wheeltracker_exception_handler(request: Request, exc: WheelTrackerError):
    """Map domain errors to HTTP responses.

    Args:
        request: The request that caused the error
        exc: The domain exception that was raised

    Returns:
        JSON error response with the exception's code and message
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, error_status in ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = error_status
            break

    if isinstance(exc, InvariantViolation):
        logger.critical(
            f"Invariant violation on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
    elif status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc}")

    detail = None
    if isinstance(exc, InsufficientLotError):
        detail = {
            "requested": str(exc.requested) if exc.requested is not None else None,
            "available": str(exc.available) if exc.available is not None else None,
        }

    body = ErrorResponse(error=exc.code, message=str(exc), detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors.

    Args:
        request: The request that caused the error
        exc: The exception that was raised

    Returns:
        JSON error response
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    body = ErrorResponse(
        error="internal_error",
        message="An unexpected error occurred",
        detail=str(exc) if settings.debug else None,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wheeltracker.server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
