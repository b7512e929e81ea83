"""
Content lifecycle service.

Governs the draft/published state machine of news articles and videos,
the fields that must change together with a transition, and which
engagement counters may be written.

State machine:
    draft -> published: stamps published_at (kept if already set)
    published -> draft: clears published_at
There is no archived state; deletion is a separate, irreversible operation.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.errors import (
    DuplicateVideo,
    Forbidden,
    NotFound,
    NotPublished,
    ValidationError,
    field_error,
)
from newsroom.models.base import utc_now
from newsroom.models.content import (
    CONTENT_STATUSES,
    STATUS_PUBLISHED,
    Video,
)
from newsroom.repositories.content import (
    SORTABLE_COLUMNS,
    ContentFilter,
    ContentModel,
    ContentRepository,
)
from newsroom.services import content_rules

logger = logging.getLogger(__name__)

# engagement kind -> counter column
ENGAGEMENT_COUNTERS = {"view": "views", "share": "shares", "like": "likes"}

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
SEARCH_MIN = 2


@dataclass
class Page:
    """One page of a listing plus the total independent of the window."""
    items: List[ContentModel]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> Dict[str, Any]:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total": self.total,
            "has_next_page": self.page < self.total_pages,
            "has_prev_page": self.page > 1,
            "limit": self.limit,
        }


class ContentLifecycle:
    """
    Lifecycle operations for one content kind.

    Args:
        session: Request database session
        model: ``News`` or ``Video``
        clock: Source of "now" (overridable in tests)
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Type[ContentModel],
        clock: Callable[[], datetime] = utc_now,
    ):
        self.model = model
        self.repo = ContentRepository(session, model)
        self.clock = clock

    @property
    def is_video(self) -> bool:
        return self.model is Video

    def _validate(self, fields: Mapping[str, Any], partial: bool) -> None:
        validator = content_rules.validate_video if self.is_video else content_rules.validate_news
        errors = validator(fields, partial=partial)
        if errors:
            raise ValidationError(errors=errors)

    async def _ensure_unique_video(self, youtube_id: str, exclude_id: Optional[str] = None) -> None:
        existing = await self.repo.get_by_youtube_id(youtube_id)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateVideo()

    async def get(self, item_id: str) -> ContentModel:
        item = await self.repo.get(item_id)
        if item is None:
            raise NotFound(f"{self._label()} not found")
        return item

    def _label(self) -> str:
        return "Video" if self.is_video else "Article"

    async def create(self, fields: Mapping[str, Any], owner_id: Optional[str]) -> ContentModel:
        """
        Validate and persist a new item.

        Raises:
            ValidationError: Every invalid or missing field
            DuplicateVideo: The derived YouTube id is already stored
        """
        values = content_rules.normalize_fields(fields)
        self._validate(values, partial=False)

        status = content_rules.initial_status(values)
        values["status"] = status
        values["published_at"] = content_rules.resolve_publish_timestamp(status, None, self.clock())
        values["created_by"] = owner_id

        if self.is_video:
            youtube_id = content_rules.extract_youtube_id(values["youtube_url"])
            await self._ensure_unique_video(youtube_id)
            values["youtube_id"] = youtube_id
            if not values.get("thumbnail_url"):
                values["thumbnail_url"] = content_rules.default_thumbnail(youtube_id)

        try:
            item = await self.repo.create(values)
        except IntegrityError as exc:
            if self.is_video:
                raise DuplicateVideo() from exc
            raise

        logger.info(
            "Content created",
            extra={"content_kind": self.model.kind, "content_id": item.id, "status": item.status, "owner_id": owner_id},
        )
        return item

    async def update(self, item_id: str, fields: Mapping[str, Any]) -> ContentModel:
        """
        Apply a partial update.

        Supplied fields are validated with the creation rules. A status in
        the update moves published_at with it; a new YouTube URL re-derives
        the id (and the default thumbnail) in the same write. Optional
        columns sent as null are cleared; a cleared thumbnail falls back to
        the default one.

        Raises:
            NotFound, ValidationError, DuplicateVideo
        """
        item = await self.get(item_id)
        clearable = content_rules.VIDEO_CLEARABLE if self.is_video else content_rules.NEWS_CLEARABLE
        values = content_rules.normalize_fields(fields, clearable=clearable)
        self._validate(values, partial=True)

        if "status" in values:
            values["published_at"] = content_rules.resolve_publish_timestamp(
                values["status"], item.published_at, self.clock()
            )

        if self.is_video and "youtube_url" in values:
            youtube_id = content_rules.extract_youtube_id(values["youtube_url"])
            if youtube_id != item.youtube_id:
                await self._ensure_unique_video(youtube_id, exclude_id=item.id)
                values["youtube_id"] = youtube_id
                old_default = content_rules.default_thumbnail(item.youtube_id)
                if "thumbnail_url" not in values and item.thumbnail_url in (None, "", old_default):
                    values["thumbnail_url"] = content_rules.default_thumbnail(youtube_id)

        if self.is_video and "thumbnail_url" in values and not values["thumbnail_url"]:
            values["thumbnail_url"] = content_rules.default_thumbnail(values.get("youtube_id", item.youtube_id))

        previous_status = item.status
        try:
            item = await self.repo.update_fields(item, values)
        except IntegrityError as exc:
            if self.is_video:
                raise DuplicateVideo() from exc
            raise

        if item.status != previous_status:
            logger.info(
                "Content status changed",
                extra={
                    "content_kind": self.model.kind,
                    "content_id": item.id,
                    "from_status": previous_status,
                    "to_status": item.status,
                },
            )
        return item

    async def delete(self, item_id: str) -> None:
        """Remove an item permanently."""
        if not await self.repo.delete(item_id):
            raise NotFound(f"{self._label()} not found")
        logger.info("Content deleted", extra={"content_kind": self.model.kind, "content_id": item_id})

    async def record_engagement(self, item_id: str, kind: str) -> int:
        """
        Increment the counter for ``kind`` by exactly one.

        Returns:
            New counter value

        Raises:
            ValidationError: Unknown kind, or like on an article
            NotFound: No such item
            NotPublished: Item is a draft
        """
        counter = ENGAGEMENT_COUNTERS.get(kind)
        if counter is None or counter not in self.model.counters:
            raise ValidationError(errors=[field_error("kind", f"Unsupported engagement: {kind}")])

        value = await self.repo.increment_if_published(item_id, counter)
        if value is not None:
            return value

        await self.get(item_id)
        raise NotPublished(f"Cannot {kind} unpublished {self._label().lower()}")

    async def view(
        self,
        item_id: str,
        caller_is_admin: bool,
        increment_view: bool = True,
    ) -> Tuple[ContentModel, List[ContentModel]]:
        """
        Read one item with up to five related items.

        Drafts are visible to admins only. The view counter is bumped for
        published items when requested; drafts are never counted.

        Raises:
            NotFound, Forbidden (draft seen by a non-admin)
        """
        item = await self.get(item_id)
        if item.status != STATUS_PUBLISHED and not caller_is_admin:
            raise Forbidden("Access denied")

        if increment_view and item.status == STATUS_PUBLISHED:
            await self.repo.increment_if_published(item.id, "views")
            item = await self.repo.refresh(item)

        related = await self.repo.related(item)
        return item, related

    def resolve_filter(self, params: Mapping[str, Any], caller_is_admin: bool) -> Tuple[ContentFilter, Dict[str, Any]]:
        """
        Validate listing parameters.

        Returns:
            (repository filter, paging/sorting options)

        Raises:
            ValidationError: Every invalid parameter
        """
        errors = []
        page = params.get("page")
        limit = params.get("limit")
        if page is None:
            page = 1
        if limit is None:
            limit = DEFAULT_PAGE_SIZE
        sort = params.get("sort") or "created_at"
        order = (params.get("order") or "desc").lower()
        category = params.get("category")
        status = params.get("status")
        search = params.get("search")

        if not isinstance(page, int) or page < 1:
            errors.append(field_error("page", "Page must be a positive integer"))
        if not isinstance(limit, int) or not 1 <= limit <= MAX_PAGE_SIZE:
            errors.append(field_error("limit", f"Limit must be between 1 and {MAX_PAGE_SIZE}"))
        if category is not None and category not in self.model.categories:
            errors.append(field_error("category", "Invalid category"))
        if status is not None and status not in CONTENT_STATUSES:
            errors.append(field_error("status", "Invalid status"))
        if search is not None and len(search.strip()) < SEARCH_MIN:
            errors.append(field_error("search", f"Search term must be at least {SEARCH_MIN} characters"))
        if sort not in SORTABLE_COLUMNS[self.model.kind]:
            errors.append(field_error("sort", f"Sort must be one of: {', '.join(SORTABLE_COLUMNS[self.model.kind])}"))
        if order not in ("asc", "desc"):
            errors.append(field_error("order", "Order must be asc or desc"))
        if errors:
            raise ValidationError(errors=errors)

        criteria = ContentFilter(
            status=status if caller_is_admin else STATUS_PUBLISHED,
            category=category,
            featured=params.get("featured"),
            search=search,
        )
        return criteria, {"page": page, "limit": limit, "sort": sort, "descending": order == "desc"}

    async def list(self, params: Mapping[str, Any], caller_is_admin: bool) -> Page:
        """Filtered, sorted, paginated listing."""
        criteria, options = self.resolve_filter(params, caller_is_admin)
        page, limit = options["page"], options["limit"]
        items, total = await self.repo.list(
            criteria,
            sort=options["sort"],
            descending=options["descending"],
            offset=(page - 1) * limit,
            limit=limit,
        )
        return Page(items=items, total=total, page=page, limit=limit)

    async def featured(self, limit: int = 5) -> List[ContentModel]:
        items, _ = await self.repo.list(
            ContentFilter(status=STATUS_PUBLISHED, featured=True),
            offset=0,
            limit=_clamp(limit),
        )
        return items

    async def trending(self, limit: int = 10) -> List[ContentModel]:
        second = "likes" if self.is_video else "shares"
        return await self.repo.ranked(["views", second], limit=_clamp(limit))


def _clamp(limit: int) -> int:
    return max(1, min(int(limit), MAX_PAGE_SIZE))
