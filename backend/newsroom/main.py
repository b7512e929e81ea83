"""
Newsroom CMS - FastAPI Application Entry Point

This module initializes the FastAPI application with all middleware,
routes, exception handlers and lifecycle event handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsroom import __version__
from newsroom.api.v1 import admin, auth, health, news, users, videos
from newsroom.core.config import settings
from newsroom.core.database import close_db, init_db
from newsroom.core.errors import NewsroomError, field_error
from newsroom.core.logging_config import setup_logging
from newsroom.middleware.logging import LoggingMiddleware
from newsroom.middleware.rate_limit import RateLimitMiddleware
from newsroom.middleware.request_id import RequestIDMiddleware
from newsroom.middleware.security_headers import SecurityHeadersMiddleware
from newsroom.schemas.common import error_response, success_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
        - Set up logging
        - Initialize database (a store that cannot be reached aborts start-up)

    Shutdown:
        - Close database connections
    """
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    await init_db()
    logger.info("Application started", extra={"environment": settings.environment})

    yield

    await close_db()


app = FastAPI(
    title=settings.project_name,
    version=__version__,
    description="Content management API for news articles and videos",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Exception handlers: every failure leaves as {success: false, message, errors?}

@app.exception_handler(NewsroomError)
async def newsroom_error_handler(request: Request, exc: NewsroomError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, exc.errors),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append(field_error(".".join(location) or "request", error.get("msg", "Invalid value")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response("Validation failed", errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        extra={"path": request.url.path, "request_id": getattr(request.state, "request_id", None)},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("Internal server error"),
    )


# Configure middleware
# Note: Middleware is executed in reverse order of registration
# (last registered = first executed)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    RateLimitMiddleware,
    default_limit=settings.default_rate_limit,
    enabled=not settings.disable_rate_limit,
)

# Logging middleware (runs after RequestID to access request_id)
app.add_middleware(LoggingMiddleware)

# Request ID middleware (sets correlation ID)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health.router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_v1_prefix}/auth", tags=["auth"])
app.include_router(news.router, prefix=f"{settings.api_v1_prefix}/news", tags=["news"])
app.include_router(videos.router, prefix=f"{settings.api_v1_prefix}/videos", tags=["videos"])
app.include_router(users.router, prefix=f"{settings.api_v1_prefix}/users", tags=["users"])
app.include_router(admin.router, prefix=f"{settings.api_v1_prefix}/admin", tags=["admin"])


@app.get("/")
async def root() -> dict:
    """Basic API information."""
    return success_response({
        "name": settings.project_name,
        "version": __version__,
        "docs": "/docs",
    })
