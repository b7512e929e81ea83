"""
Account self-service endpoints (bookmarks, preferences).

Guests get 403 here: their sessions are never persisted.
"""

from fastapi import APIRouter, status

from newsroom.api.dependencies import AccountCaller, DatabaseSession
from newsroom.api.v1.content import serialize
from newsroom.schemas.auth import AccountView
from newsroom.schemas.common import success_response
from newsroom.schemas.content import NewsView, VideoView
from newsroom.schemas.user import PreferencesUpdate
from newsroom.services.accounts import AccountService

router = APIRouter()


@router.get("/me/bookmarks")
async def list_bookmarks(caller: AccountCaller, db: DatabaseSession) -> dict:
    bookmarks = await AccountService(db).bookmarks(caller.user_id)
    return success_response({
        "news": serialize(NewsView, bookmarks["news"]),
        "videos": serialize(VideoView, bookmarks["videos"]),
    })


@router.post("/me/bookmarks/{kind}/{item_id}", status_code=status.HTTP_201_CREATED)
async def add_bookmark(kind: str, item_id: str, caller: AccountCaller, db: DatabaseSession) -> dict:
    """
    Bookmark an article (kind=news) or video (kind=videos).

    Errors:
        400 unknown kind, 404 unknown item, 403 guest session
    """
    await AccountService(db).add_bookmark(caller.user_id, kind, item_id)
    return success_response(message="Bookmark added")


@router.delete("/me/bookmarks/{kind}/{item_id}")
async def remove_bookmark(kind: str, item_id: str, caller: AccountCaller, db: DatabaseSession) -> dict:
    await AccountService(db).remove_bookmark(caller.user_id, kind, item_id)
    return success_response(message="Bookmark removed")


@router.put("/me/preferences")
async def update_preferences(request: PreferencesUpdate, caller: AccountCaller, db: DatabaseSession) -> dict:
    user = await AccountService(db).update_preferences(caller.user, request.model_dump(exclude_unset=True))
    return success_response({"user": AccountView.model_validate(user)}, "Preferences updated")
