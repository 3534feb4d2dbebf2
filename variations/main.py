"""Variations API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from variations.api.health import router as health_router
from variations.api.middleware import setup_middleware
from variations.api.variations import router as variations_router
from variations.application.payloads import validation_errors
from variations.catalog import get_catalog_store, seed_demo_catalog
from variations.domain.exceptions import DomainError, UnauthorizedError
from variations.infrastructure.config import settings
from variations.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging()

    # Startup
    logger.info(
        "Starting Variations API",
        version=settings.api_version,
        debug=settings.debug,
    )

    store = get_catalog_store()
    if settings.seed_demo_catalog and store.product_count == 0:
        products = seed_demo_catalog(store)
        logger.info(
            "Demo catalog seeded",
            product_ids=[p.id for p in products],
            variation_count=store.variation_count,
        )

    yield

    # Shutdown
    logger.info("Shutting down Variations API")


app = FastAPI(
    title="Variations API",
    description="REST resource for the variations of variable products",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Total", "X-Total-Pages"],
)

# Setup custom middleware (request ID, caller identity, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(variations_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the standard error body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details if details is not None else [],
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=headers,
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map domain errors to their HTTP status."""
    headers = None
    if isinstance(exc, UnauthorizedError) and exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}

    logger.info(
        "Request rejected",
        path=request.url.path,
        method=request.method,
        error_code=exc.error_code,
        status_code=exc.status_code,
    )
    return error_response(
        request,
        exc.status_code,
        exc.error_code,
        exc.message,
        details=exc.details,
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed parameters and bodies as 400."""
    return error_response(
        request,
        400,
        "INVALID_PARAM",
        "Invalid parameter(s)",
        details=validation_errors(exc),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    # Extract error details from exception
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return error_response(
        request,
        exc.status_code,
        error_code,
        message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return error_response(
        request,
        500,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
