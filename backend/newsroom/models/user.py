"""
Account model and bookmark association tables.

An account is a person who can authenticate with email/password or a
phone OTP. Guests are never stored here.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    JSON,
    String,
    Table,
)

from newsroom.models.base import (
    Base,
    ModelMixin,
    TimestampMixin,
    UTCDateTime,
    UUIDMixin,
    utc_now,
)

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"
ROLE_GUEST = "guest"

# Roles that can be stored on an account (guests are never persisted)
ACCOUNT_ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_SUPER_ADMIN)
ADMIN_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPER_ADMIN})

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUS_SUSPENDED = "suspended"
ACCOUNT_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_SUSPENDED)


def default_preferences() -> dict:
    return {
        "language": "en",
        "categories": [],
        "theme": "auto",
        "font_size": "medium",
        "notifications": {
            "push": True,
            "email": True,
            "breaking_news": True,
            "category_updates": True,
            "silent_hours": {"enabled": False, "start": "22:00", "end": "08:00"},
        },
    }


news_bookmarks = Table(
    "news_bookmarks",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("news_id", String(36), ForeignKey("news.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
)

video_bookmarks = Table(
    "video_bookmarks",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("video_id", String(36), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", UTCDateTime, nullable=False, default=utc_now),
)


class User(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Account record.

    Attributes:
        email: Unique, stored lower-cased
        hashed_password: bcrypt hash (never store or return plaintext)
        role: user, admin or super_admin
        status: active, inactive or suspended
        login_attempts: Consecutive failed logins since the last success
        lock_until: While in the future, authentication is refused

    Security considerations:
        - Never log or expose hashed_password
        - Accounts are deactivated through status, never hard-deleted
    """

    __tablename__ = "users"

    name = Column(String(50), nullable=False)
    email = Column(String(254), nullable=False, unique=True, index=True)
    hashed_password = Column(String, nullable=False)
    phone = Column(String(32), nullable=True, index=True)
    role = Column(String(20), nullable=False, default=ROLE_USER, index=True)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE, index=True)
    avatar = Column(String, nullable=True)
    preferences = Column(JSON, nullable=False, default=default_preferences)

    email_verified = Column(Boolean, nullable=False, default=False)
    phone_verified = Column(Boolean, nullable=False, default=False)

    last_login = Column(UTCDateTime, nullable=True)
    last_active_at = Column(UTCDateTime, nullable=True, default=utc_now, index=True)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(UTCDateTime, nullable=True)
    device_info = Column(JSON, nullable=True)

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        """True iff lock_until is set and still in the future."""
        if self.lock_until is None:
            return False
        return self.lock_until > (now or utc_now())

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r}, role={self.role!r})"
