"""
Admin dashboard aggregates.

Counts and engagement sums are computed by the database; nothing here is
sampled or estimated.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models.base import utc_now
from newsroom.models.content import STATUS_DRAFT, STATUS_PUBLISHED, News, Video
from newsroom.models.user import ROLE_USER
from newsroom.repositories.content import ContentRepository
from newsroom.repositories.user import UserRepository

TOP_CONTENT_LIMIT = 10


class DashboardService:
    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.users = UserRepository(session)
        self.news = ContentRepository(session, News)
        self.videos = ContentRepository(session, Video)
        self.clock = clock

    @staticmethod
    async def _status_counts(repo: ContentRepository) -> Dict[str, int]:
        published = await repo.count(STATUS_PUBLISHED)
        drafts = await repo.count(STATUS_DRAFT)
        return {"total": published + drafts, "published": published, "draft": drafts}

    async def overview(self, period_days: int = 30) -> Dict[str, Any]:
        """Content and user counts plus engagement totals of published content."""
        since = self.clock() - timedelta(days=period_days)
        return {
            "period_days": period_days,
            "news": await self._status_counts(self.news),
            "videos": await self._status_counts(self.videos),
            "users": {
                "total": await self.users.count(),
                "readers": await self.users.count(ROLE_USER),
                "active_in_period": await self.users.count_active_since(since),
            },
            "engagement": {
                "news": await self.news.counter_totals(),
                "videos": await self.videos.counter_totals(),
            },
        }

    async def content_stats(self, period_days: int = 30) -> Dict[str, Any]:
        """Top published items and average engagement of recent content."""
        since = self.clock() - timedelta(days=period_days)
        return {
            "period_days": period_days,
            "top_news": await self.news.ranked(["views", "shares"], TOP_CONTENT_LIMIT),
            "top_videos": await self.videos.ranked(["views", "likes"], TOP_CONTENT_LIMIT),
            "averages": {
                "news": await self.news.counter_averages(since),
                "videos": await self.videos.counter_averages(since),
            },
        }
