"""Loja API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, static image hosting and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from loja.api.health import router as health_router
from loja.api.middleware import setup_middleware
from loja.api.products import router as products_router
from loja.infrastructure.config import settings
from loja.infrastructure.database import create_schema, engine
from loja.infrastructure.logging import configure_logging

configure_logging(settings.log_level, json_output=settings.log_json)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting Loja API",
        version=settings.api_version,
        debug=settings.debug,
    )

    Path(settings.image_storage_dir).mkdir(parents=True, exist_ok=True)

    if settings.create_schema_on_startup:
        await create_schema()
        logger.info("Database schema ensured")

    yield

    # Shutdown
    logger.info("Shutting down Loja API")
    await engine.dispose()


app = FastAPI(
    title="Loja API",
    description="Product catalog management with reseller pricing feed",
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
)

# Setup custom middleware (request ID, authentication, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)

# Uploaded product images
app.mount(
    settings.image_url_path,
    StaticFiles(directory=settings.image_storage_dir, check_dir=False),
    name="images",
)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

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

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "Server error",
            "details": [],
            "request_id": request_id,
        },
    )
