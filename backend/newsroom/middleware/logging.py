"""
Access logging middleware.

Logs every request on the way in and out with method, path, status code,
latency and correlation ID. Must run inside RequestIDMiddleware so that
``request.state.request_id`` is already set.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from newsroom.core.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each HTTP request and its outcome.

    Example:
        app.add_middleware(LoggingMiddleware)
        app.add_middleware(RequestIDMiddleware)  # added last, runs first

    Log output (JSON):
        {"level": "INFO", "message": "Request completed", "method": "GET",
         "path": "/api/v1/news", "status_code": 200, "latency_ms": 12.5,
         "request_id": "abc-123"}
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        method = request.method
        path = request.url.path
        request_id = getattr(request.state, "request_id", None)

        log_with_context(
            logger,
            "debug",
            "Request started",
            request_id=request_id,
            path=path,
            method=method,
            query_params=str(request.query_params) or None,
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {exc}",
                extra={
                    "method": method,
                    "path": path,
                    "latency_ms": round(latency_ms, 2),
                    "request_id": request_id,
                    "exception_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise

        latency_ms = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            "warning" if response.status_code >= 500 else "info",
            "Request completed",
            request_id=request_id,
            path=path,
            method=method,
            status_code=response.status_code,
            latency_ms=round(latency_ms, 2),
        )
        return response
