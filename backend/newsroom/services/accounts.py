"""
Account self-service: bookmarks and reading preferences.

Guests never reach this layer; their sessions are not persisted, so there
is nothing to attach a bookmark or preference to.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.errors import NotFound, ValidationError, field_error
from newsroom.models.user import User, default_preferences
from newsroom.repositories.user import BOOKMARK_TABLES, UserRepository
from newsroom.services import account_rules

logger = logging.getLogger(__name__)

BOOKMARK_KINDS = tuple(BOOKMARK_TABLES)


class AccountService:
    """
    Bookmark and preference operations for one account.

    Attributes:
        users: UserRepository bound to the request session
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in BOOKMARK_KINDS:
            raise ValidationError(errors=[field_error("kind", f"Kind must be one of: {', '.join(BOOKMARK_KINDS)}")])

    async def bookmarks(self, user_id: str) -> Dict[str, List[Any]]:
        """Bookmarked items per kind, most recently bookmarked first."""
        return {kind: await self.users.list_bookmarks(user_id, kind) for kind in BOOKMARK_KINDS}

    async def add_bookmark(self, user_id: str, kind: str, item_id: str) -> None:
        """
        Bookmark an item. Bookmarks are a set: adding twice is a no-op.

        Raises:
            ValidationError: Unknown kind
            NotFound: No such item
        """
        self._check_kind(kind)
        _, model, _ = BOOKMARK_TABLES[kind]
        if await self.session.get(model, item_id) is None:
            raise NotFound(f"{'Video' if kind == 'videos' else 'Article'} not found")
        await self.users.add_bookmark(user_id, kind, item_id)
        logger.info("Bookmark added", extra={"user_id": user_id, "content_kind": kind, "content_id": item_id})

    async def remove_bookmark(self, user_id: str, kind: str, item_id: str) -> None:
        """
        Raises:
            ValidationError: Unknown kind
            NotFound: Item was not bookmarked
        """
        self._check_kind(kind)
        if not await self.users.remove_bookmark(user_id, kind, item_id):
            raise NotFound("Bookmark not found")
        logger.info("Bookmark removed", extra={"user_id": user_id, "content_kind": kind, "content_id": item_id})

    async def update_preferences(self, user: User, fields: Mapping[str, Any]) -> User:
        """
        Merge a partial preferences update into the stored preferences.

        Nested notification settings are merged key by key.

        Raises:
            ValidationError: Every invalid preference
        """
        errors = account_rules.validate_preferences(fields)
        if errors:
            raise ValidationError(errors=errors)

        merged = copy.deepcopy(user.preferences or default_preferences())
        for key, value in fields.items():
            if key == "notifications":
                notifications = merged.setdefault("notifications", {})
                for flag, setting in value.items():
                    if flag == "silent_hours":
                        notifications.setdefault("silent_hours", {}).update(setting)
                    else:
                        notifications[flag] = setting
            else:
                merged[key] = value

        # JSON columns only notice reassignment
        user.preferences = merged
        return await self.users.save(user)
