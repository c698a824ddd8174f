"""API middleware for the Loja API.

Provides:
- Request ID correlation
- Credential resolution (bearer token or reseller API key)
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import jwt
import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from loja.api.auth import AuthFailure, Principal, verify_api_key
from loja.infrastructure.config import settings
from loja.infrastructure.security import decode_access_token

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
# Authentication Middleware
# ============================================================================


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware resolving request credentials into a principal.

    Accepts either ``Authorization: Bearer <token>`` or the reseller API
    key header. Requests without credentials pass through anonymously.
    Credentials that are present but invalid are recorded as an
    ``AuthFailure``; routes that require a principal reject them with 401,
    public routes ignore them.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Resolve the principal for the request.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response from the next handler.
        """
        path = request.url.path.rstrip("/")
        request.state.principal = None
        request.state.auth_failure = None

        auth_header = request.headers.get("Authorization")
        api_key = request.headers.get(settings.api_key_header)

        if auth_header:
            parts = auth_header.split(" ", 1)
            if len(parts) != 2 or parts[0].lower() != "bearer":
                logger.warning(
                    "Invalid authorization format",
                    path=path,
                    method=request.method,
                )
                request.state.auth_failure = AuthFailure(
                    "UNAUTHORIZED",
                    "Invalid Authorization header format. Use 'Bearer <token>'",
                )
                return await call_next(request)

            try:
                claims = decode_access_token(parts[1])
            except jwt.InvalidTokenError as e:
                logger.warning(
                    "Invalid bearer token",
                    path=path,
                    method=request.method,
                    error=str(e),
                )
                request.state.auth_failure = AuthFailure(
                    "INVALID_TOKEN", "Invalid or expired token"
                )
                return await call_next(request)

            request.state.principal = Principal.from_token_claims(claims)

        elif api_key is not None:
            if not verify_api_key(api_key):
                logger.warning(
                    "Invalid API key",
                    path=path,
                    method=request.method,
                )
                request.state.auth_failure = AuthFailure(
                    "INVALID_API_KEY",
                    "Invalid API key",
                    scheme=settings.api_key_header,
                )
                return await call_next(request)

            request.state.principal = Principal.reseller()

        return await call_next(request)


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
                    "message": "Server error",
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
    # Error handling (inside credential resolution)
    app.add_middleware(ErrorHandlerMiddleware)

    # Credential resolution
    app.add_middleware(AuthenticationMiddleware)

    # Request ID correlation (outermost - every response gets the header)
    app.add_middleware(RequestIdMiddleware)
