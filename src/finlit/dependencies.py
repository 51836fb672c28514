"""FastAPI dependency injection container.

This module provides dependency injection functions for use with FastAPI's
Depends() pattern. Dependencies are organized by functionality and can be
easily mocked for testing via ``app.dependency_overrides``.
"""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from finlit.cache import CacheService, get_cache_service
from finlit.config import Settings, get_settings
from finlit.core.exceptions import AuthenticationError, InvalidIdentifierError
from finlit.repositories import (
    FinanceLessonRepository,
    LearningContentRepository,
    VideoRepository,
)
from finlit.services.content import ContentService
from finlit.services.finance import FinanceLessonService

# Type alias for common dependency patterns
SettingsDep = Annotated[Settings, Depends(get_settings)]
CacheDep = Annotated[CacheService, Depends(get_cache_service)]


# ========================================
# Database Dependencies
# ========================================
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session.

    Yields a database session that automatically handles
    commit on success and rollback on exception.

    Yields:
        AsyncSession: Database session
    """

    from finlit.core.database import get_async_session

    async for session in get_async_session():
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]


# ========================================
# Identifier Parsing
# ========================================
def parse_uuid(value: str, field: str) -> UUID:
    """Parse a path/query identifier, raising a 400 domain error if malformed."""
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise InvalidIdentifierError(field, value) from None


# ========================================
# Auth Dependencies
# ========================================
async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Identity of the caller, forwarded by the upstream auth layer.

    Raises:
        AuthenticationError: 401 if the X-User-ID header is missing or not a UUID

    Returns:
        UUID: Current user id
    """
    if not x_user_id:
        raise AuthenticationError("Missing X-User-ID header")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise AuthenticationError("Invalid X-User-ID header") from None


async def get_current_user_id_optional(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UUID | None:
    """Caller identity if supplied and well-formed, otherwise None."""
    if not x_user_id:
        return None
    try:
        return UUID(x_user_id)
    except ValueError:
        return None


CurrentUserDep = Annotated[UUID, Depends(get_current_user_id)]
OptionalUserDep = Annotated[UUID | None, Depends(get_current_user_id_optional)]


# ========================================
# Service Dependencies
# ========================================
def get_content_service(
    db: DbSessionDep,
    cache: CacheDep,
    settings: SettingsDep,
) -> ContentService:
    """Get the learning content service bound to the request session."""
    return ContentService(
        LearningContentRepository(db),
        VideoRepository(db),
        cache,
        settings,
    )


def get_finance_service(
    db: DbSessionDep,
    cache: CacheDep,
    settings: SettingsDep,
) -> FinanceLessonService:
    """Get the finance module service bound to the request session."""
    return FinanceLessonService(FinanceLessonRepository(db), cache, settings)


ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
FinanceServiceDep = Annotated[FinanceLessonService, Depends(get_finance_service)]
