"""
Content models: news articles and videos.

Both share the lifecycle columns in ``ContentMixin`` (status, counters,
publish timestamp, owner). Derived values such as the publish timestamp and
the YouTube identifier are computed by ``newsroom.services.content_rules``
before persistence, not by ORM hooks.
"""

import math

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import declared_attr

from newsroom.models.base import Base, ModelMixin, TimestampMixin, UTCDateTime, UUIDMixin

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"
CONTENT_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED)

NEWS_CATEGORIES = ("Politics", "Technology", "Sports", "Entertainment", "Business", "Health")
VIDEO_CATEGORIES = ("News", "Analysis", "Interview", "Documentary", "Live", "Entertainment")

WORDS_PER_MINUTE = 200


class ContentMixin:
    """Columns shared by every content kind."""

    title = Column(String(200), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_DRAFT, index=True)
    views = Column(Integer, nullable=False, default=0)
    shares = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    published_at = Column(UTCDateTime, nullable=True)

    @declared_attr
    def created_by(cls):
        return Column(
            String(36),
            ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        )

    @property
    def is_published(self) -> bool:
        return self.status == STATUS_PUBLISHED


class News(Base, UUIDMixin, TimestampMixin, ContentMixin, ModelMixin):
    """
    News article.

    Attributes:
        summary: Short teaser, 10..500 characters
        content: Article body, at least 50 characters
        image_url: Optional http(s) image reference
        author: Display byline
    """

    __tablename__ = "news"

    kind = "news"
    categories = NEWS_CATEGORIES
    counters = ("views", "shares")

    summary = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    author = Column(String(100), nullable=False, default="Admin")

    @property
    def reading_time(self) -> int:
        """Estimated reading time in minutes."""
        words = len((self.content or "").split())
        return math.ceil(words / WORDS_PER_MINUTE)


class Video(Base, UUIDMixin, TimestampMixin, ContentMixin, ModelMixin):
    """
    YouTube-hosted video.

    Attributes:
        youtube_url: Validated watch/embed/short URL
        youtube_id: Identifier derived from youtube_url (unique)
        thumbnail_url: Defaults to the YouTube maxres thumbnail
        duration: MM:SS or HH:MM:SS
        likes: Like counter
    """

    __tablename__ = "videos"

    kind = "videos"
    categories = VIDEO_CATEGORIES
    counters = ("views", "shares", "likes")

    description = Column(String(1000), nullable=True)
    youtube_url = Column(String, nullable=False)
    youtube_id = Column(String(11), nullable=False, unique=True, index=True)
    thumbnail_url = Column(String, nullable=True)
    duration = Column(String(8), nullable=True)
    likes = Column(Integer, nullable=False, default=0)

    @property
    def embed_url(self) -> str:
        return f"https://www.youtube.com/embed/{self.youtube_id}"
