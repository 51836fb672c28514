"""Tests for FinanceLessonService."""

import uuid
from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from finlit.cache import CacheService
from finlit.core.exceptions import (
    AuthorizationError,
    LessonNotFoundError,
    UnknownModuleError,
)
from finlit.schemas.finance import LessonCreate, LessonUpdate
from finlit.services.finance import FinanceLessonService, resolve_module


@pytest.fixture
def service(
    mock_lesson_repo: MagicMock, local_cache: CacheService, test_settings
) -> FinanceLessonService:
    return FinanceLessonService(mock_lesson_repo, local_cache, test_settings)


@pytest.fixture
def remote_service(
    mock_lesson_repo: MagicMock, remote_cache: CacheService, test_settings
) -> FinanceLessonService:
    return FinanceLessonService(mock_lesson_repo, remote_cache, test_settings)


class TestResolveModule:
    @pytest.mark.parametrize(
        "slug",
        ["finance-basics", "sip-learning", "mutual-funds", "fraud-awareness", "tax-planning"],
    )
    def test_known_modules(self, slug: str) -> None:
        assert resolve_module(slug).value == slug

    def test_unknown_module(self) -> None:
        with pytest.raises(UnknownModuleError):
            resolve_module("crypto-moonshots")


class TestListLessons:
    @pytest.mark.asyncio
    async def test_page_cached_under_module_key_until_ttl(
        self,
        service: FinanceLessonService,
        mock_lesson_repo: MagicMock,
        local_cache: CacheService,
        clock,
        make_lesson,
    ) -> None:
        mock_lesson_repo.count_matching.return_value = 1
        mock_lesson_repo.find_page.return_value = [make_lesson()]

        first = await service.list_lessons(
            "finance-basics", page=1, limit=10, difficulty="beginner"
        )
        assert first.from_cache is False
        assert await local_cache.get("finance-basics:1:10:beginner:true") == first.data

        clock.advance(3599)
        second = await service.list_lessons(
            "finance-basics", page=1, limit=10, difficulty="beginner"
        )
        assert second.from_cache is True

        clock.advance(2)
        third = await service.list_lessons(
            "finance-basics", page=1, limit=10, difficulty="beginner"
        )
        assert third.from_cache is False
        assert mock_lesson_repo.find_page.await_count == 2

    @pytest.mark.asyncio
    async def test_queries_scoped_to_module(
        self, service: FinanceLessonService, mock_lesson_repo: MagicMock
    ) -> None:
        result = await service.list_lessons("tax-planning", page=3, limit=5)

        mock_lesson_repo.count_matching.assert_awaited_once_with(
            "tax-planning", difficulty=None, is_published=True
        )
        mock_lesson_repo.find_page.assert_awaited_once_with(
            "tax-planning", difficulty=None, is_published=True, offset=10, limit=5
        )
        assert result.data["module"] == "tax-planning"

    @pytest.mark.asyncio
    async def test_unknown_module_never_reaches_repository(
        self, service: FinanceLessonService, mock_lesson_repo: MagicMock
    ) -> None:
        with pytest.raises(UnknownModuleError):
            await service.list_lessons("nope")

        mock_lesson_repo.count_matching.assert_not_called()


class TestGetLesson:
    @pytest.mark.asyncio
    async def test_cached_after_first_read(
        self, service: FinanceLessonService, mock_lesson_repo: MagicMock, make_lesson
    ) -> None:
        lesson = make_lesson()
        mock_lesson_repo.get_in_module.return_value = lesson

        first = await service.get_lesson("finance-basics", lesson.id)
        second = await service.get_lesson("finance-basics", lesson.id)

        assert first.data["id"] == str(lesson.id)
        assert second.from_cache is True
        mock_lesson_repo.get_in_module.assert_awaited_once_with("finance-basics", lesson.id)

    @pytest.mark.asyncio
    async def test_missing_lesson(self, service: FinanceLessonService) -> None:
        with pytest.raises(LessonNotFoundError):
            await service.get_lesson("mutual-funds", uuid.uuid4())


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_defaults_video_metadata_and_purges_module(
        self,
        remote_service: FinanceLessonService,
        mock_lesson_repo: MagicMock,
        mock_redis: MagicMock,
        async_iter,
        sample_lesson_data: dict[str, Any],
        user_id: uuid.UUID,
    ) -> None:
        mock_redis.scan_iter = MagicMock(side_effect=lambda **_: async_iter([]))

        data = await remote_service.create_lesson(
            "sip-learning", LessonCreate(**sample_lesson_data), user_id
        )

        assert data["module"] == "sip-learning"
        assert data["video_title"] == sample_lesson_data["title"]
        assert data["video_description"] == sample_lesson_data["description"]
        mock_lesson_repo.commit.assert_awaited_once()
        mock_redis.scan_iter.assert_called_once_with(match="sip-learning:*", count=500)
        mock_redis.delete.assert_any_await(f"sip-learning:{data['id']}")

    @pytest.mark.asyncio
    async def test_update_invalidates_lesson_and_pages(
        self,
        service: FinanceLessonService,
        mock_lesson_repo: MagicMock,
        local_cache: CacheService,
        make_lesson,
        user_id: uuid.UUID,
    ) -> None:
        lesson = make_lesson(title="Old")
        mock_lesson_repo.get_in_module.return_value = lesson
        await service.get_lesson("finance-basics", lesson.id)
        await service.list_lessons("finance-basics")

        await service.update_lesson(
            "finance-basics", lesson.id, LessonUpdate(title="New"), user_id
        )

        assert await local_cache.get(f"finance-basics:{lesson.id}") is None
        fresh = await service.get_lesson("finance-basics", lesson.id)
        assert fresh.from_cache is False
        assert fresh.data["title"] == "New"

    @pytest.mark.asyncio
    async def test_only_creator_may_delete(
        self,
        service: FinanceLessonService,
        mock_lesson_repo: MagicMock,
        make_lesson,
        other_user_id: uuid.UUID,
    ) -> None:
        lesson = make_lesson()
        mock_lesson_repo.get_in_module.return_value = lesson

        with pytest.raises(AuthorizationError):
            await service.delete_lesson("finance-basics", lesson.id, other_user_id)

        mock_lesson_repo.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete(
        self,
        service: FinanceLessonService,
        mock_lesson_repo: MagicMock,
        make_lesson,
        user_id: uuid.UUID,
    ) -> None:
        lesson = make_lesson()
        mock_lesson_repo.get_in_module.return_value = lesson

        await service.delete_lesson("finance-basics", lesson.id, user_id)

        mock_lesson_repo.delete.assert_awaited_once_with(lesson)
        mock_lesson_repo.commit.assert_awaited_once()


class TestLessonUpdateSchema:
    @pytest.mark.parametrize("field", ["title", "body", "video_url", "is_published"])
    def test_null_rejected_for_required_columns(self, field: str) -> None:
        with pytest.raises(ValidationError):
            LessonUpdate(**{field: None})

    def test_omitted_fields_stay_unset(self) -> None:
        assert LessonUpdate(detailed_body=None).model_dump(exclude_unset=True) == {
            "detailed_body": None
        }
