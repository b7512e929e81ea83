"""
User repository for account persistence.

Provides the data access layer for accounts and their bookmarks. Lockout
counters are changed with single UPDATE statements so that concurrent
login attempts against one account cannot lose an increment.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import and_, case, delete, func, insert, literal, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models.base import UTCDateTime, utc_now
from newsroom.models.content import News, Video
from newsroom.models.user import (
    STATUS_ACTIVE,
    User,
    news_bookmarks,
    video_bookmarks,
)

# bookmark kind -> (association table, content model, content column name)
BOOKMARK_TABLES = {
    "news": (news_bookmarks, News, "news_id"),
    "videos": (video_bookmarks, Video, "video_id"),
}

USER_SORT_COLUMNS = {
    "created_at": User.created_at,
    "name": User.name,
    "email": User.email,
    "last_active_at": User.last_active_at,
}


class UserRepository:
    """
    Repository for account data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Look up an account by email (case-insensitive)."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Optional[User]:
        stmt = select(User).where(User.phone == phone).order_by(User.created_at).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def create(self, **fields) -> User:
        """
        Insert a new account.

        ``hashed_password`` must already be hashed; this layer never sees
        plaintext secrets.
        """
        user = User(**fields)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def save(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def record_failed_login(
        self,
        user: User,
        max_attempts: int,
        lock_duration: timedelta,
        now: Optional[datetime] = None,
    ) -> User:
        """
        Count one failed login and lock the account at the threshold.

        A lock that has already expired is cleared and the counter restarts
        at 1. Otherwise the counter is incremented and, when it reaches
        ``max_attempts`` on an unlocked account, lock_until is set to
        ``now + lock_duration``. Both columns change in one statement.
        """
        now = now or utc_now()
        now_param = literal(now, UTCDateTime)
        lock_param = literal(now + lock_duration, UTCDateTime)

        lock_expired = and_(User.lock_until.is_not(None), User.lock_until <= now_param)
        not_locked = or_(User.lock_until.is_(None), User.lock_until <= now_param)

        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(
                login_attempts=case(
                    (lock_expired, 1),
                    else_=User.login_attempts + 1,
                ),
                lock_until=case(
                    (lock_expired, literal(None, UTCDateTime)),
                    (and_(User.login_attempts + 1 >= max_attempts, not_locked), lock_param),
                    else_=User.lock_until,
                ),
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.refresh(user)
        return user

    async def record_successful_login(self, user: User, now: Optional[datetime] = None) -> User:
        """Reset lockout state and stamp last login/activity."""
        now = now or utc_now()
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(login_attempts=0, lock_until=None, last_login=now, last_active_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.refresh(user)
        return user

    async def record_phone_login(self, user: User, now: Optional[datetime] = None) -> User:
        """Stamp an OTP sign-in. Lockout state belongs to password logins and is left as is."""
        now = now or utc_now()
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(phone_verified=True, last_login=now, last_active_at=now)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.refresh(user)
        return user

    async def touch_last_active(self, user: User, now: Optional[datetime] = None) -> None:
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(last_active_at=now or utc_now())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

    async def set_status(self, user: User, status: str) -> User:
        user.status = status
        return await self.save(user)

    async def list_users(
        self,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        """
        Page through accounts.

        Returns:
            (users on the page, total matching accounts)
        """
        conditions = []
        if role:
            conditions.append(User.role == role)
        if status:
            conditions.append(User.status == status)
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(or_(
                func.lower(User.name).like(pattern),
                func.lower(User.email).like(pattern),
            ))

        column = USER_SORT_COLUMNS.get(sort, User.created_at)
        order = column.desc() if descending else column.asc()

        stmt = select(User).where(*conditions).order_by(order, User.id).offset(offset).limit(limit)
        count_stmt = select(func.count()).select_from(User).where(*conditions)

        users = list((await self.session.execute(stmt)).scalars().all())
        total = (await self.session.execute(count_stmt)).scalar_one()
        return users, total

    async def count(self, role: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(User)
        if role:
            stmt = stmt.where(User.role == role)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_active_since(self, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(User)
            .where(User.status == STATUS_ACTIVE, User.last_active_at >= since)
        )
        return (await self.session.execute(stmt)).scalar_one()

    # Bookmarks

    async def add_bookmark(self, user_id: str, kind: str, item_id: str) -> None:
        """Add a bookmark; adding one that already exists is a no-op."""
        table, _, column = BOOKMARK_TABLES[kind]
        existing = await self.session.execute(
            select(table.c.user_id).where(table.c.user_id == user_id, table.c[column] == item_id)
        )
        if existing.first() is None:
            await self.session.execute(
                insert(table).values({"user_id": user_id, column: item_id, "created_at": utc_now()})
            )

    async def remove_bookmark(self, user_id: str, kind: str, item_id: str) -> bool:
        table, _, column = BOOKMARK_TABLES[kind]
        result = await self.session.execute(
            delete(table).where(table.c.user_id == user_id, table.c[column] == item_id)
        )
        return result.rowcount > 0

    async def list_bookmarks(self, user_id: str, kind: str) -> Sequence:
        table, model, column = BOOKMARK_TABLES[kind]
        stmt = (
            select(model)
            .join(table, table.c[column] == model.id)
            .where(table.c.user_id == user_id)
            .order_by(table.c.created_at.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())
