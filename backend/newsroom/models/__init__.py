"""
SQLAlchemy ORM models for the newsroom CMS.

Import models from this module to ensure they're registered with SQLAlchemy.
"""

from newsroom.models.base import Base, TimestampMixin, UUIDMixin, ModelMixin
from newsroom.models.user import User, news_bookmarks, video_bookmarks
from newsroom.models.content import News, Video

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "ModelMixin",
    # Models
    "User",
    "News",
    "Video",
    "news_bookmarks",
    "video_bookmarks",
]
