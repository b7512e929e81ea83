"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- An in-memory database session per test
- The FastAPI app wired to that session, and an HTTP client for it
- Account factories and bearer tokens
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test_secret_key_at_least_32_characters_long_for_jwt"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_JSON"] = "false"
os.environ["DISABLE_RATE_LIMIT"] = "true"  # Disable rate limiting for tests

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from newsroom.core.database import get_db  # noqa: E402
from newsroom.core.security import get_password_hash  # noqa: E402
from newsroom.models import Base  # noqa: E402
from newsroom.models.user import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_USER, User  # noqa: E402
from newsroom.services.auth_guard import issue_token  # noqa: E402

TEST_PASSWORD = "secret1"

# Hashed once; every fixture account shares it
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture
async def async_session():
    """
    In-memory database session for a single test.

    Yields:
        AsyncSession bound to a fresh schema
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def app_with_db(async_session: AsyncSession):
    """
    Override database dependency in app.

    Returns:
        FastAPI app whose requests all use ``async_session``
    """
    from newsroom.main import app

    async def override_get_db():
        yield async_session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_with_db):
    async with AsyncClient(transport=ASGITransport(app=app_with_db), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def create_account(async_session: AsyncSession):
    """
    Factory for persisted accounts.

    Example:
        user = await create_account(email="a@x.com", role="admin")
    """
    counter = {"n": 0}

    async def _create(email=None, role=ROLE_USER, password=None, **fields) -> User:
        counter["n"] += 1
        user = User(
            name=fields.pop("name", f"Test User {counter['n']}"),
            email=email or f"user{counter['n']}@example.com",
            hashed_password=get_password_hash(password) if password else _TEST_PASSWORD_HASH,
            role=role,
            **fields,
        )
        async_session.add(user)
        await async_session.commit()
        await async_session.refresh(user)
        return user

    return _create


@pytest.fixture
async def admin_user(create_account) -> User:
    return await create_account(email="admin@example.com", role=ROLE_ADMIN)


@pytest.fixture
async def super_admin_user(create_account) -> User:
    return await create_account(email="root@example.com", role=ROLE_SUPER_ADMIN)


@pytest.fixture
async def reader(create_account) -> User:
    return await create_account(email="reader@example.com", role=ROLE_USER)


@pytest.fixture
def auth_header():
    """Build an Authorization header for an account (or guest id)."""

    def _header(account_id: str, is_guest: bool = False) -> dict:
        return {"Authorization": f"Bearer {issue_token(account_id, is_guest=is_guest)}"}

    return _header


@pytest.fixture
def admin_headers(admin_user, auth_header) -> dict:
    return auth_header(admin_user.id)


@pytest.fixture
def reader_headers(reader, auth_header) -> dict:
    return auth_header(reader.id)


@pytest.fixture
def guest_headers(auth_header) -> dict:
    return auth_header("guest_abc123", is_guest=True)


@pytest.fixture
def article_fields():
    """Valid article body; keyword overrides replace single fields."""

    def _fields(**overrides) -> dict:
        fields = {
            "title": "Council approves budget",
            "summary": "The council passed the annual budget.",
            "content": "After a lengthy session the council voted to approve the annual city budget.",
            "category": "Politics",
        }
        fields.update(overrides)
        return fields

    return _fields


@pytest.fixture
def video_fields():
    """Valid video body; keyword overrides replace single fields."""

    def _fields(**overrides) -> dict:
        fields = {
            "title": "Budget explained",
            "youtube_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "category": "Analysis",
            "duration": "04:12",
        }
        fields.update(overrides)
        return fields

    return _fields


@pytest.fixture
def password() -> str:
    """Plaintext password of every ``create_account`` account."""
    return TEST_PASSWORD
