"""
Base models and mixins for SQLAlchemy ORM.

Provides the declarative base, mixins for timestamps and UUID keys, and a
UTC-aware datetime column type.
"""

from datetime import datetime, timezone
from typing import Any, Optional
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator


# SQLAlchemy declarative base for all ORM models
Base = declarative_base()


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime column that always round-trips aware UTC datetimes.

    SQLite drops tzinfo, so values are normalised to naive UTC on the way
    in and tagged as UTC on the way out.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:  # noqa: ANN001
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:  # noqa: ANN001
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp columns.

    Attributes:
        created_at: Timestamp when record was created (immutable)
        updated_at: Timestamp when record was last updated (auto-updated)
    """

    created_at = Column(
        UTCDateTime,
        nullable=False,
        default=utc_now,
        index=True,
        doc="UTC timestamp when record was created"
    )

    updated_at = Column(
        UTCDateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        doc="UTC timestamp when record was last updated"
    )


class UUIDMixin:
    """
    Mixin that adds a UUID primary key column.

    UUIDs are stored as strings for easy migration to PostgreSQL later.
    """

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="UUID primary key"
    )


class ModelMixin:
    """Common model helpers for serialization and representation."""

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to dictionary.

        Note:
            Only includes columns, not relationships.
        """
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        attrs = ", ".join(
            f"{key}={repr(value)}"
            for key, value in self.to_dict().items()
            if key in ["id", "name", "title", "email"]
        )
        return f"{self.__class__.__name__}({attrs})"
