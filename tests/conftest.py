"""Pytest configuration and fixtures."""

import fnmatch
import os
import random
from collections.abc import AsyncGenerator, Callable
from typing import Any

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("APP_SECRET_KEY", "test-secret-key-that-is-long-enough-for-tests")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TMDB_API_KEY", "test-api-key")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cinemood.auth import hash_password
from cinemood.auth.dependencies import get_current_user, get_optional_user
from cinemood.constants import PREFERENCES_SETTINGS_KEY
from cinemood.db.database import get_db
from cinemood.exceptions import CacheError
from cinemood.main import app
from cinemood.models.base import Base
from cinemood.models.schemas import Movie
from cinemood.models.user import User
from cinemood.services.recommendations import RecommendationFetcher, get_recommendation_fetcher
from cinemood.services.selection import TrackerRegistry, get_tracker_registry

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

HAPPY_PREFERENCES = {
    "mood": "happy",
    "watchingWith": "alone",
    "genre": "",
    "oldMovie": False,
    "ageAppropriate": False,
    "category": "popular",
}


class MemoryCache:
    """In-process stand-in for the Redis cache backend."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> Any | None:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete_pattern(self, pattern: str) -> int:
        keys = [key for key in self.store if fnmatch.fnmatch(key, pattern)]
        for key in keys:
            del self.store[key]
        return len(keys)


class BrokenCache:
    """Cache backend whose every call fails."""

    async def get(self, key: str) -> Any | None:
        raise CacheError("connection refused")

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        raise CacheError("connection refused")

    async def delete_pattern(self, pattern: str) -> int:
        raise CacheError("connection refused")


class PagedSource:
    """Movie source serving fixed discover pages keyed by page number."""

    def __init__(self, pages: dict[int, list[Movie]] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[dict] = []

    async def discover_movies(self, params: dict) -> list[Movie]:
        self.calls.append(dict(params))
        return list(self.pages.get(params["page"], []))


def build_movie(movie_id: int, **overrides: Any) -> Movie:
    data = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "overview": "",
        "release_date": "2015-06-01",
        "vote_average": 7.0,
        "vote_count": 500,
        "genre_ids": [35],
    }
    data.update(overrides)
    return Movie(**data)


@pytest.fixture
def make_movie() -> Callable[..., Movie]:
    return build_movie


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def broken_cache() -> BrokenCache:
    return BrokenCache()


@pytest.fixture
def paged_source() -> PagedSource:
    """Two pages of three movies each."""
    return PagedSource(
        {
            1: [build_movie(i) for i in (1, 2, 3)],
            2: [build_movie(i) for i in (4, 5, 6)],
        }
    )


@pytest.fixture
def fetcher(paged_source: PagedSource) -> RecommendationFetcher:
    return RecommendationFetcher(paged_source, rng=random.Random(42))


@pytest.fixture
def registry() -> TrackerRegistry:
    return TrackerRegistry(rng=random.Random(7))


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user for authenticated tests."""
    user = User(
        name="Test User",
        email="test@example.com",
        password_hash=hash_password("secret123"),
        settings={},
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def user_with_preferences(db_session: AsyncSession, test_user: User) -> User:
    """Test user whose happy/alone/popular preferences are already saved."""
    test_user.settings = {PREFERENCES_SETTINGS_KEY: dict(HAPPY_PREFERENCES)}
    await db_session.commit()
    await db_session.refresh(test_user)
    return test_user


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, registry: TrackerRegistry
) -> AsyncGenerator[AsyncClient, None]:
    """Create an unauthenticated test client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tracker_registry] = lambda: registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(
    db_session: AsyncSession,
    test_user: User,
    registry: TrackerRegistry,
    fetcher: RecommendationFetcher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an authenticated test client with a test user."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    def override_get_current_user() -> User:
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_optional_user] = override_get_current_user
    app.dependency_overrides[get_tracker_registry] = lambda: registry
    app.dependency_overrides[get_recommendation_fetcher] = lambda: fetcher

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
