"""
Admin endpoints: dashboard aggregates and user management.

Every route requires an admin token. Changing another admin's status
additionally requires super_admin.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from newsroom.api.dependencies import AdminCaller, DatabaseSession, Guard
from newsroom.api.v1.content import serialize
from newsroom.core.errors import ValidationError, field_error
from newsroom.models.user import ACCOUNT_ROLES, ACCOUNT_STATUSES
from newsroom.repositories.user import USER_SORT_COLUMNS, UserRepository
from newsroom.schemas.auth import AccountView
from newsroom.schemas.common import success_response
from newsroom.schemas.content import NewsView, VideoView
from newsroom.schemas.user import UserStatusUpdate
from newsroom.services.dashboard import DashboardService
from newsroom.services.lifecycle import MAX_PAGE_SIZE, Page

router = APIRouter()

Period = Annotated[int, Query(ge=1, le=365)]


@router.get("/dashboard")
async def dashboard(caller: AdminCaller, db: DatabaseSession, period: Period = 30) -> dict:
    """
    Content counts by status, user counts and engagement totals.

    Args:
        period: Days counted as "recent" for active users
    """
    overview = await DashboardService(db).overview(period)
    return success_response(overview)


@router.get("/content-stats")
async def content_stats(caller: AdminCaller, db: DatabaseSession, period: Period = 30) -> dict:
    stats = await DashboardService(db).content_stats(period)
    stats["top_news"] = serialize(NewsView, stats["top_news"])
    stats["top_videos"] = serialize(VideoView, stats["top_videos"])
    return success_response(stats)


@router.get("/users")
async def list_users(
    caller: AdminCaller,
    db: DatabaseSession,
    page: int = 1,
    limit: int = 20,
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "created_at",
    order: str = "desc",
) -> dict:
    """Paginated account listing filtered by role, status and name/email search."""
    errors = []
    if page < 1:
        errors.append(field_error("page", "Page must be a positive integer"))
    if not 1 <= limit <= MAX_PAGE_SIZE:
        errors.append(field_error("limit", f"Limit must be between 1 and {MAX_PAGE_SIZE}"))
    if role is not None and role not in ACCOUNT_ROLES:
        errors.append(field_error("role", "Invalid role"))
    if status is not None and status not in ACCOUNT_STATUSES:
        errors.append(field_error("status", "Invalid status"))
    if sort not in USER_SORT_COLUMNS:
        errors.append(field_error("sort", f"Sort must be one of: {', '.join(USER_SORT_COLUMNS)}"))
    if order not in ("asc", "desc"):
        errors.append(field_error("order", "Order must be asc or desc"))
    if errors:
        raise ValidationError(errors=errors)

    users, total = await UserRepository(db).list_users(
        role=role,
        status=status,
        search=search,
        sort=sort,
        descending=order == "desc",
        offset=(page - 1) * limit,
        limit=limit,
    )
    result = Page(items=users, total=total, page=page, limit=limit)
    return success_response({
        "users": serialize(AccountView, users),
        "pagination": result.pagination(),
    })


@router.put("/users/{user_id}/status")
async def update_user_status(user_id: str, request: UserStatusUpdate, caller: AdminCaller, guard: Guard) -> dict:
    """
    Activate, deactivate or suspend an account.

    Errors:
        404 unknown user, 403 admin target without super_admin
    """
    user = await guard.set_account_status(caller, user_id, request.status)
    return success_response({"user": AccountView.model_validate(user)}, f"User status updated to {request.status}")
