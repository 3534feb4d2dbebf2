"""API middleware for the variations API.

Provides:
- Request ID correlation
- Caller identity resolution from API keys
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from variations.application.auth import Identity, identity_for_api_key

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Identity Middleware
# ============================================================================


# Paths that never look at credentials
PUBLIC_PATHS = {
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
}


class IdentityMiddleware(BaseHTTPMiddleware):
    """Resolve the caller identity from the Authorization header.

    Supports Bearer token format: "Authorization: Bearer <api_key>".
    Requests without the header proceed as the anonymous identity; the
    authorization gate decides what they may do. A malformed header or an
    unknown key is rejected here with 401.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Attach an Identity to request state.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or 401 error.
        """
        path = request.url.path
        if path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc"):
            request.state.identity = Identity.anonymous()
            return await call_next(request)

        auth_header = request.headers.get("Authorization")

        if not auth_header:
            request.state.identity = Identity.anonymous()
            return await call_next(request)

        parts = auth_header.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            logger.warning(
                "Invalid authorization format",
                path=request.url.path,
                method=request.method,
            )
            return self._reject(
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <api_key>'",
                request,
            )

        identity = identity_for_api_key(parts[1].strip())
        if identity is None:
            logger.warning(
                "Invalid API key",
                path=request.url.path,
                method=request.method,
            )
            return self._reject("INVALID_API_KEY", "Invalid API key", request)

        request.state.identity = identity
        structlog.contextvars.bind_contextvars(user_id=identity.user_id)
        try:
            return await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("user_id")

    @staticmethod
    def _reject(error_code: str, message: str, request: Request) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "error_code": error_code,
                "message": message,
                "details": [],
                "request_id": getattr(request.state, "request_id", None),
            },
            headers={"WWW-Authenticate": "Bearer"},
        )


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": request_id,
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Caller identity (innermost - sees the request ID)
    app.add_middleware(IdentityMiddleware)

    # Request ID correlation
    app.add_middleware(RequestIdMiddleware)

    # Error handling (outermost - catches all errors)
    app.add_middleware(ErrorHandlerMiddleware)
