"""
Content repository for news and video persistence.

One repository class serves both content kinds; it is bound to a model
(``News`` or ``Video``) at construction. Counter increments are conditional
UPDATE statements so concurrent engagement calls never lose a count and
never touch unpublished items.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models.content import News, STATUS_PUBLISHED, Video

ContentModel = Union[News, Video]

# Columns a caller is allowed to sort by, per kind
SORTABLE_COLUMNS = {
    "news": ("created_at", "updated_at", "published_at", "title", "views", "shares"),
    "videos": ("created_at", "updated_at", "published_at", "title", "views", "shares", "likes"),
}

# Columns scanned by free-text search, per kind
SEARCH_COLUMNS = {
    "news": ("title", "summary", "content"),
    "videos": ("title", "description"),
}


@dataclass
class ContentFilter:
    """
    Resolved listing filter.

    ``status`` is already forced to published for non-admin callers by the
    time it reaches the repository.
    """
    status: Optional[str] = None
    category: Optional[str] = None
    featured: Optional[bool] = None
    search: Optional[str] = None
    created_since: Optional[datetime] = None


class ContentRepository:
    """
    Repository for one content kind.

    Attributes:
        session: SQLAlchemy async session for database operations
        model: ``News`` or ``Video``
    """

    def __init__(self, session: AsyncSession, model: Type[ContentModel]):
        self.session = session
        self.model = model

    @property
    def kind(self) -> str:
        return self.model.kind

    async def get(self, item_id: str) -> Optional[ContentModel]:
        result = await self.session.execute(select(self.model).where(self.model.id == item_id))
        return result.scalar_one_or_none()

    async def get_by_youtube_id(self, youtube_id: str) -> Optional[Video]:
        result = await self.session.execute(select(Video).where(Video.youtube_id == youtube_id))
        return result.scalar_one_or_none()

    async def create(self, fields: Dict[str, Any]) -> ContentModel:
        item = self.model(**fields)
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def update_fields(self, item: ContentModel, fields: Dict[str, Any]) -> ContentModel:
        """
        Write ``fields`` onto ``item`` in a single UPDATE.

        Status, publish timestamp and derived video columns are expected to
        be in ``fields`` together so they land atomically.
        """
        if fields:
            stmt = (
                update(self.model)
                .where(self.model.id == item.id)
                .values(**fields)
                .execution_options(synchronize_session="fetch")
            )
            await self.session.execute(stmt)
        await self.session.refresh(item)
        return item

    async def refresh(self, item: ContentModel) -> ContentModel:
        await self.session.refresh(item)
        return item

    async def delete(self, item_id: str) -> bool:
        result = await self.session.execute(delete(self.model).where(self.model.id == item_id))
        return result.rowcount > 0

    async def increment_if_published(self, item_id: str, counter: str) -> Optional[int]:
        """
        Add exactly one to ``counter`` when the item is published.

        Returns:
            The new counter value, or None when no published item matched
        """
        column = getattr(self.model, counter)
        stmt = (
            update(self.model)
            .where(self.model.id == item_id, self.model.status == STATUS_PUBLISHED)
            .values({counter: column + 1})
            .returning(column)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _conditions(self, criteria: ContentFilter) -> list:
        conditions = []
        if criteria.status:
            conditions.append(self.model.status == criteria.status)
        if criteria.category:
            conditions.append(self.model.category == criteria.category)
        if criteria.featured is not None:
            conditions.append(self.model.featured.is_(criteria.featured))
        if criteria.created_since is not None:
            conditions.append(self.model.created_at >= criteria.created_since)
        if criteria.search:
            pattern = f"%{criteria.search.strip().lower()}%"
            conditions.append(or_(*(
                func.lower(getattr(self.model, name)).like(pattern)
                for name in SEARCH_COLUMNS[self.kind]
            )))
        return conditions

    async def list(
        self,
        criteria: ContentFilter,
        sort: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[ContentModel], int]:
        """
        Page through items matching ``criteria``.

        Returns:
            (items on the page, total matching items independent of paging)
        """
        if sort not in SORTABLE_COLUMNS[self.kind]:
            sort = "created_at"
        column = getattr(self.model, sort)
        order = column.desc() if descending else column.asc()

        conditions = self._conditions(criteria)
        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(order, self.model.created_at.desc(), self.model.id)
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(self.model).where(*conditions)

        items = list((await self.session.execute(stmt)).scalars().all())
        total = (await self.session.execute(count_stmt)).scalar_one()
        return items, total

    async def related(self, item: ContentModel, limit: int = 5) -> List[ContentModel]:
        """Newest published items in the same category, excluding ``item``."""
        stmt = (
            select(self.model)
            .where(
                self.model.id != item.id,
                self.model.category == item.category,
                self.model.status == STATUS_PUBLISHED,
            )
            .order_by(self.model.created_at.desc())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def ranked(self, order_by: List[str], limit: int) -> List[ContentModel]:
        """Published items ordered by the given counters, highest first."""
        columns = [getattr(self.model, name).desc() for name in order_by]
        stmt = (
            select(self.model)
            .where(self.model.status == STATUS_PUBLISHED)
            .order_by(*columns, self.model.created_at.desc())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def count(self, status: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if status:
            stmt = stmt.where(self.model.status == status)
        return (await self.session.execute(stmt)).scalar_one()

    async def counter_totals(self, status: str = STATUS_PUBLISHED) -> Dict[str, int]:
        """Sum of every counter over items with ``status``."""
        stmt = select(*(
            func.coalesce(func.sum(getattr(self.model, name)), 0)
            for name in self.model.counters
        )).where(self.model.status == status)
        row = (await self.session.execute(stmt)).one()
        return {name: int(value) for name, value in zip(self.model.counters, row)}

    async def counter_averages(self, since: datetime) -> Dict[str, float]:
        """Average of every counter over published items created since ``since``."""
        stmt = select(
            func.count(),
            *(func.avg(getattr(self.model, name)) for name in self.model.counters),
        ).where(self.model.status == STATUS_PUBLISHED, self.model.created_at >= since)
        row = (await self.session.execute(stmt)).one()
        count, averages = row[0], row[1:]
        result: Dict[str, float] = {"items": int(count)}
        for name, value in zip(self.model.counters, averages):
            result[f"avg_{name}"] = round(float(value or 0), 2)
        return result
