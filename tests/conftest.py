"""Pytest configuration and fixtures for FinLit tests.

This module provides reusable fixtures for:
- Settings overrides
- Async test client
- Test database session (in-memory SQLite)
- Cache services (mocked Redis or local-only) with a controllable clock
- Sample request payloads
"""

import uuid
from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from finlit.cache import CacheService, LocalBackend, RemoteBackend, set_cache_service
from finlit.config import Settings
from finlit.main import create_app
from finlit.models import FinanceLesson, LearningContent

# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create test-specific settings.

    Uses an in-memory SQLite database and disables Redis so nothing outside
    the process is contacted.
    """
    return Settings(
        app_env="development",  # type: ignore[arg-type]
        debug=False,
        log_level="DEBUG",  # type: ignore[arg-type]
        log_format="console",  # type: ignore[arg-type]
        database_url="sqlite+aiosqlite:///:memory:",
        database_create_tables=True,
        cache_enabled=False,
        redis_db=15,
    )


# =============================================================================
# Clock / Cache Fixtures
# =============================================================================


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def local_backend(clock: FakeClock) -> LocalBackend:
    return LocalBackend(clock=clock)


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock redis.asyncio client."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.setex = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.hset = AsyncMock(return_value=1)
    redis.hget = AsyncMock(return_value=None)
    redis.hincrby = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock(return_value=None)
    redis.scan_iter = MagicMock(return_value=_async_iter([]))
    return redis


def _async_iter(items: list[str]) -> Any:
    async def gen() -> AsyncGenerator[str, None]:
        for item in items:
            yield item

    return gen()


@pytest.fixture
def async_iter() -> Any:
    """Factory for async iterators, used to stub ``scan_iter``."""
    return _async_iter


@pytest.fixture
def local_cache(local_backend: LocalBackend) -> CacheService:
    """Cache service with no remote store: every operation hits the local store."""
    return CacheService(remote=None, local=local_backend)


@pytest.fixture
async def remote_cache(mock_redis: MagicMock, local_backend: LocalBackend) -> CacheService:
    """Cache service over a mocked Redis client, already marked available."""
    cache = CacheService(RemoteBackend(mock_redis), local=local_backend)
    await cache.connect()
    return cache


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def test_db_session(test_settings: Settings) -> AsyncGenerator[AsyncSession, None]:
    """Create an isolated in-memory database and yield a session on it.

    Usage:
        async def test_create(test_db_session: AsyncSession):
            test_db_session.add(LearningContent(...))
            await test_db_session.commit()
    """
    from finlit.core.database import close_db, get_session_factory, init_db

    await init_db(test_settings)
    async with get_session_factory()() as session:
        yield session
    await close_db()


@pytest.fixture
async def initialized_db(test_settings: Settings) -> AsyncGenerator[None, None]:
    """Initialize the in-memory database for request-scoped sessions."""
    from finlit.core.database import close_db, init_db

    await init_db(test_settings)
    yield
    await close_db()


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(
    test_settings: Settings, local_cache: CacheService
) -> Generator[FastAPI, None, None]:
    """Create a test FastAPI application with test settings and a local cache."""
    set_cache_service(local_cache)
    application = create_app(settings=test_settings)
    yield application
    set_cache_service(None)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing.

    This client makes requests to the test app without starting a server.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.UUID("11111111-1111-4111-8111-111111111111")


@pytest.fixture
def other_user_id() -> uuid.UUID:
    return uuid.UUID("22222222-2222-4222-8222-222222222222")


@pytest.fixture
def sample_content_data() -> dict[str, Any]:
    """Return a valid create-content payload."""
    return {
        "title": "Budgeting 101",
        "description": "Build your first monthly budget",
        "body": "Track income, list expenses, and assign every rupee a job.",
        "category_slug": "budgeting",
        "difficulty": "beginner",
        "estimated_time": 15,
        "tags": ["budget", "basics"],
        "learning_objectives": ["Create a budget"],
        "is_published": True,
    }


@pytest.fixture
def sample_lesson_data() -> dict[str, Any]:
    """Return a valid create-lesson payload."""
    return {
        "title": "What is inflation?",
        "description": "Why prices rise over time",
        "body": "Inflation is the rate at which prices increase.",
        "video_url": "https://videos.example.com/inflation.mp4",
        "difficulty": "beginner",
    }


# =============================================================================
# Entity / Repository Fixtures
# =============================================================================


def _stamp(entity: Any) -> Any:
    """Fill in the fields the database would generate on insert."""
    now = datetime.now(timezone.utc)
    if getattr(entity, "id", None) is None:
        entity.id = uuid.uuid4()
    entity.created_at = entity.created_at or now
    entity.updated_at = now
    for name in ("views", "rating_count"):
        if hasattr(entity, name) and getattr(entity, name) is None:
            setattr(entity, name, 0)
    if hasattr(entity, "rating_average") and entity.rating_average is None:
        entity.rating_average = 0.0
    return entity


@pytest.fixture
def make_content(user_id: uuid.UUID) -> Any:
    """Factory for unsaved LearningContent rows with generated fields filled."""

    def factory(**overrides: Any) -> LearningContent:
        values: dict[str, Any] = {
            "title": "Budgeting 101",
            "description": "Build your first monthly budget",
            "category_slug": "budgeting",
            "difficulty": "beginner",
            "tags": [],
            "prerequisites": [],
            "learning_objectives": [],
            "resources": [],
            "videos": [],
            "created_by": user_id,
            "is_published": True,
            "is_public": True,
            "views": 0,
        }
        values.update(overrides)
        return _stamp(LearningContent(**values))

    return factory


@pytest.fixture
def make_lesson(user_id: uuid.UUID) -> Any:
    """Factory for unsaved FinanceLesson rows with generated fields filled."""

    def factory(**overrides: Any) -> FinanceLesson:
        values: dict[str, Any] = {
            "module": "finance-basics",
            "title": "What is inflation?",
            "description": "Why prices rise over time",
            "body": "Inflation is the rate at which prices increase.",
            "video_url": "https://videos.example.com/inflation.mp4",
            "difficulty": "beginner",
            "tags": [],
            "prerequisites": [],
            "learning_objectives": [],
            "is_published": True,
            "created_by": user_id,
            "views": 0,
        }
        values.update(overrides)
        return _stamp(FinanceLesson(**values))

    return factory


async def _apply_update(entity: Any, values: dict[str, Any] | None = None) -> Any:
    for name, value in (values or {}).items():
        setattr(entity, name, value)
    return entity


async def _increment_views(entity: Any) -> Any:
    entity.views += 1
    return entity


async def _create(entity: Any) -> Any:
    return _stamp(entity)


def _mock_repository() -> MagicMock:
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=_create)
    repo.update = AsyncMock(side_effect=_apply_update)
    repo.delete = AsyncMock(return_value=None)
    repo.commit = AsyncMock(return_value=None)
    repo.count_matching = AsyncMock(return_value=0)
    repo.find_page = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_content_repo() -> MagicMock:
    """Mocked LearningContentRepository with in-memory update semantics."""
    repo = _mock_repository()
    repo.increment_views = AsyncMock(side_effect=_increment_views)
    repo.overview_for_owner = AsyncMock(
        return_value={
            "total_content": 0,
            "published_content": 0,
            "total_videos": 0,
            "total_views": 0,
        }
    )
    repo.category_breakdown = AsyncMock(return_value=[])
    repo.difficulty_breakdown = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_video_repo() -> MagicMock:
    repo = _mock_repository()
    repo.count_for_uploader = AsyncMock(return_value=0)
    repo.find_page_for_uploader = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_lesson_repo() -> MagicMock:
    repo = _mock_repository()
    repo.get_in_module = AsyncMock(return_value=None)
    return repo
