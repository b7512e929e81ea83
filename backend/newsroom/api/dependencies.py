"""
FastAPI dependency functions.

Provides reusable dependency injection functions for routes: database
sessions, caller resolution (optional or required bearer token), role
gates, and the attempt limiter for sensitive auth endpoints.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.config import settings
from newsroom.core.database import get_db
from newsroom.core.errors import Forbidden, Malformed, NewsroomError, RateLimited
from newsroom.middleware.rate_limit import client_address
from newsroom.models.content import News, Video
from newsroom.services.auth_guard import (
    REQUIRE_ADMIN,
    REQUIRE_SUPER_ADMIN,
    AuthGuard,
    Caller,
    authorize,
)
from newsroom.services.lifecycle import ContentLifecycle
from newsroom.services.rate_limiter import AttemptLimiter

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; a missing header is handled by the dependencies
security = HTTPBearer(auto_error=False)

# One attempt window per client address, shared by login/register/OTP endpoints
sensitive_limiter = AttemptLimiter(
    max_attempts=settings.sensitive_rate_limit,
    window_seconds=settings.sensitive_rate_window_seconds,
)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
BearerCredentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]


def get_auth_guard(db: DatabaseSession) -> AuthGuard:
    return AuthGuard(db)


Guard = Annotated[AuthGuard, Depends(get_auth_guard)]


async def get_optional_caller(credentials: BearerCredentials, guard: Guard) -> Optional[Caller]:
    """
    Resolve the caller for public read endpoints.

    No token means anonymous. An invalid, expired or revoked token also
    downgrades the caller to anonymous instead of failing the request.
    """
    if credentials is None:
        return None
    try:
        return await guard.verify_token(credentials.credentials)
    except NewsroomError as exc:
        logger.info("Ignoring unusable bearer token on public endpoint", extra={"reason": exc.kind})
        return None


async def get_current_caller(credentials: BearerCredentials, guard: Guard) -> Caller:
    """
    Dependency for routes that require a valid bearer token.

    Raises:
        Malformed: No token provided, or the token cannot be decoded
        Expired: Token lifetime is over
        AccountNotFound, Inactive, Locked: Account can no longer act
    """
    if credentials is None:
        raise Malformed("Access denied. No token provided.")
    try:
        return await guard.verify_token(credentials.credentials)
    except NewsroomError as exc:
        logger.warning("Bearer token rejected", extra={"reason": exc.kind, "status_code": exc.status_code})
        raise


OptionalCaller = Annotated[Optional[Caller], Depends(get_optional_caller)]
CurrentCaller = Annotated[Caller, Depends(get_current_caller)]


async def require_account(caller: CurrentCaller) -> Caller:
    """Authenticated, persisted account (guests are refused)."""
    if caller.is_guest:
        raise Forbidden("Guest sessions cannot perform this action. Please sign in.")
    return caller


async def require_admin(caller: CurrentCaller) -> Caller:
    if not authorize(caller.role, REQUIRE_ADMIN):
        raise Forbidden("Access denied. Admin privileges required.")
    return caller


async def require_super_admin(caller: CurrentCaller) -> Caller:
    if not authorize(caller.role, REQUIRE_SUPER_ADMIN):
        raise Forbidden("Access denied. Super admin privileges required.")
    return caller


AccountCaller = Annotated[Caller, Depends(require_account)]
AdminCaller = Annotated[Caller, Depends(require_admin)]
SuperAdminCaller = Annotated[Caller, Depends(require_super_admin)]


async def limit_sensitive_attempts(request: Request) -> None:
    """
    Count one attempt against the caller's address.

    Raises:
        RateLimited: The address used up its attempts for the window
    """
    if settings.disable_rate_limit:
        return
    address = client_address(request)
    retry_after = await sensitive_limiter.hit(address)
    if retry_after is not None:
        logger.warning(
            "Sensitive endpoint throttled",
            extra={"client_ip": address, "path": request.url.path, "retry_after": retry_after},
        )
        raise RateLimited(retry_after)


def get_news_lifecycle(db: DatabaseSession) -> ContentLifecycle:
    return ContentLifecycle(db, News)


def get_video_lifecycle(db: DatabaseSession) -> ContentLifecycle:
    return ContentLifecycle(db, Video)


NewsLifecycle = Annotated[ContentLifecycle, Depends(get_news_lifecycle)]
VideoLifecycle = Annotated[ContentLifecycle, Depends(get_video_lifecycle)]
