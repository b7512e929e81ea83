"""
General request throttling using a token bucket per client address.

Token Bucket Algorithm:
- Each client address gets a bucket with a fixed capacity
- Tokens are added at a constant rate (refill_rate)
- Each request consumes one token
- If no tokens are available, the request is rejected with 429

This is the coarse, site-wide throttle. Login and registration endpoints
additionally go through ``newsroom.services.rate_limiter.AttemptLimiter``.

Note: in-memory only; not shared across worker processes.
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Probes must keep working while a client is throttled
EXEMPT_PATH_SUFFIXES = ("/health", "/health/ready")


def client_address(request: Request) -> str:
    """
    Client IP for throttling.

    Takes the first hop of X-Forwarded-For when present (trusting the
    proxy in front of the app), otherwise the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class TokenBucket:
    """
    Token bucket for rate limiting.

    Attributes:
        capacity: Maximum number of tokens in the bucket (burst size)
        refill_rate: Number of tokens added per second
        tokens: Current number of available tokens
        last_refill: Timestamp of last refill operation
    """

    def __init__(self, capacity: int, refill_rate: float, clock: Callable[[], float] = time.monotonic):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if refill_rate <= 0:
            raise ValueError("refill_rate must be positive")
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self._clock = clock
        self.last_refill = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def consume(self, tokens: int = 1) -> bool:
        """
        Take ``tokens`` from the bucket if available.

        Returns:
            True if tokens were available and consumed, False otherwise
        """
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def get_wait_time(self) -> float:
        """Seconds until the next token is available."""
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.refill_rate


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-address request throttle.

    Returns 429 in the standard response envelope when the bucket is empty.
    Bucket state is only touched between awaits, so no lock is needed on a
    single event loop.

    Example:
        app.add_middleware(RateLimitMiddleware, default_limit=120)
    """

    def __init__(
        self,
        app,
        default_limit: int = 120,
        enabled: bool = True,
        cleanup_interval: int = 300,
        idle_timeout: int = 600,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            app: ASGI application
            default_limit: Requests per minute per client
            enabled: False turns the middleware into a pass-through
            cleanup_interval: Seconds between sweeps of idle buckets
            idle_timeout: Buckets unused this long are dropped
        """
        super().__init__(app)
        self.default_limit = default_limit
        self.enabled = enabled
        self.cleanup_interval = cleanup_interval
        self.idle_timeout = idle_timeout
        self._clock = clock

        # {address: (bucket, last_access)}
        self.buckets: Dict[str, Tuple[TokenBucket, float]] = {}
        self.last_cleanup = clock()

        logger.info(
            "Rate limiting initialized",
            extra={"default_limit": default_limit, "enabled": enabled},
        )

    def _get_or_create_bucket(self, address: str) -> TokenBucket:
        now = self._clock()
        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_buckets(now)

        entry: Optional[Tuple[TokenBucket, float]] = self.buckets.get(address)
        if entry is not None:
            bucket = entry[0]
        else:
            bucket = TokenBucket(
                capacity=self.default_limit,
                refill_rate=self.default_limit / 60.0,
                clock=self._clock,
            )
        self.buckets[address] = (bucket, now)
        return bucket

    def _cleanup_old_buckets(self, now: float) -> None:
        stale = [
            address for address, (_, last_access) in self.buckets.items()
            if now - last_access > self.idle_timeout
        ]
        for address in stale:
            del self.buckets[address]
        if stale:
            logger.debug("Cleaned up idle rate limit buckets", extra={"count": len(stale)})
        self.last_cleanup = now

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        path = request.url.path
        if not self.enabled or path.endswith(EXEMPT_PATH_SUFFIXES):
            return await call_next(request)

        address = client_address(request)
        bucket = self._get_or_create_bucket(address)

        if not bucket.consume():
            retry_after = int(bucket.get_wait_time()) + 1
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_ip": address,
                    "path": path,
                    "limit": self.default_limit,
                    "retry_after": retry_after,
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "message": "Too many requests. Please try again later.",
                    "data": {"retry_after": retry_after},
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.default_limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.default_limit)
        response.headers["X-RateLimit-Remaining"] = str(int(bucket.tokens))
        return response
