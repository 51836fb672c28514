"""Finance learning module service.

Each of the five finance modules is its own cache namespace: listing pages
live at ``<module>:<page>:<limit>:<difficulty>:<published>`` and lessons at
``<module>:<id>``. Any write to a module purges its whole namespace.
"""

from typing import Any
from uuid import UUID

import structlog

from finlit.cache import CachedResult, CacheKeys, CacheService, cached_fetch
from finlit.config import Settings
from finlit.core.exceptions import AuthorizationError, LessonNotFoundError, UnknownModuleError
from finlit.models.finance import FinanceLesson, FinanceModule
from finlit.repositories.finance import FinanceLessonRepository
from finlit.schemas.common import PaginationMeta, normalize_page
from finlit.schemas.finance import LessonCreate, LessonPage, LessonResponse, LessonUpdate

logger = structlog.get_logger(__name__)


def resolve_module(module: str) -> FinanceModule:
    """Map a URL slug to a finance module.

    Raises:
        UnknownModuleError: If the slug names no module
    """
    try:
        return FinanceModule(module)
    except ValueError:
        raise UnknownModuleError(module) from None


def serialize_lesson(lesson: FinanceLesson) -> dict[str, Any]:
    return LessonResponse.model_validate(lesson).model_dump(mode="json")


class FinanceLessonService:
    """CRUD plus cached listings for the finance learning modules."""

    def __init__(
        self,
        lesson_repo: FinanceLessonRepository,
        cache: CacheService,
        settings: Settings,
    ) -> None:
        self.lesson_repo = lesson_repo
        self.cache = cache
        self.settings = settings

    async def list_lessons(
        self,
        module: str,
        *,
        page: int | None = 1,
        limit: int | None = None,
        difficulty: str | None = None,
        is_published: bool = True,
    ) -> CachedResult:
        """One page of a module's lessons, cached per filter combination."""
        slug = resolve_module(module).value
        page, limit = normalize_page(
            page,
            limit,
            default_limit=self.settings.default_page_size,
            max_limit=self.settings.max_page_size,
        )
        difficulty = getattr(difficulty, "value", difficulty)

        async def load() -> dict[str, Any]:
            total = await self.lesson_repo.count_matching(
                slug, difficulty=difficulty, is_published=is_published
            )
            lessons = await self.lesson_repo.find_page(
                slug,
                difficulty=difficulty,
                is_published=is_published,
                offset=(page - 1) * limit,
                limit=limit,
            )
            return LessonPage(
                module=slug,
                content=[LessonResponse.model_validate(lesson) for lesson in lessons],
                pagination=PaginationMeta.from_counts(page, limit, total),
            ).model_dump(mode="json")

        key = CacheKeys.finance_page(slug, page, limit, difficulty, is_published)
        return await cached_fetch(
            self.cache, key, load, self.settings.cache_ttl_finance_page
        )

    async def get_lesson(self, module: str, lesson_id: UUID) -> CachedResult:
        slug = resolve_module(module).value

        async def load() -> dict[str, Any]:
            lesson = await self.lesson_repo.get_in_module(slug, lesson_id)
            if lesson is None:
                raise LessonNotFoundError(slug, str(lesson_id))
            return serialize_lesson(lesson)

        return await cached_fetch(
            self.cache,
            CacheKeys.finance_lesson(slug, lesson_id),
            load,
            self.settings.cache_ttl_document,
        )

    async def _invalidate(self, slug: str, lesson_id: UUID) -> None:
        await self.cache.delete(CacheKeys.finance_lesson(slug, lesson_id))
        await self.cache.delete_pattern(CacheKeys.namespace(slug))

    async def _get_owned(self, slug: str, lesson_id: UUID, user_id: UUID) -> FinanceLesson:
        lesson = await self.lesson_repo.get_in_module(slug, lesson_id)
        if lesson is None:
            raise LessonNotFoundError(slug, str(lesson_id))
        if lesson.created_by != user_id:
            raise AuthorizationError()
        return lesson

    async def create_lesson(
        self, module: str, data: LessonCreate, user_id: UUID
    ) -> dict[str, Any]:
        slug = resolve_module(module).value
        values = data.model_dump(mode="json")
        values["video_title"] = values.get("video_title") or data.title
        values["video_description"] = values.get("video_description") or data.description

        lesson = await self.lesson_repo.create(
            FinanceLesson(**values, module=slug, created_by=user_id)
        )
        await self.lesson_repo.commit()

        await self._invalidate(slug, lesson.id)
        logger.info("finance_lesson_created", module=slug, lesson_id=str(lesson.id))
        return serialize_lesson(lesson)

    async def update_lesson(
        self, module: str, lesson_id: UUID, data: LessonUpdate, user_id: UUID
    ) -> dict[str, Any]:
        slug = resolve_module(module).value
        lesson = await self._get_owned(slug, lesson_id, user_id)

        lesson = await self.lesson_repo.update(
            lesson, data.model_dump(mode="json", exclude_unset=True)
        )
        await self.lesson_repo.commit()

        await self._invalidate(slug, lesson_id)
        logger.info("finance_lesson_updated", module=slug, lesson_id=str(lesson_id))
        return serialize_lesson(lesson)

    async def delete_lesson(self, module: str, lesson_id: UUID, user_id: UUID) -> None:
        slug = resolve_module(module).value
        lesson = await self._get_owned(slug, lesson_id, user_id)

        await self.lesson_repo.delete(lesson)
        await self.lesson_repo.commit()

        await self._invalidate(slug, lesson_id)
        logger.info("finance_lesson_deleted", module=slug, lesson_id=str(lesson_id))
