"""FinanceLessonRepository - module-scoped lesson queries."""

from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select

from finlit.models.finance import FinanceLesson
from finlit.repositories.base import BaseRepository


class FinanceLessonRepository(BaseRepository[FinanceLesson]):
    """Repository for FinanceLesson entities."""

    def _filtered(
        self,
        query: Select[Any],
        module: str,
        difficulty: str | None,
        is_published: bool | None,
    ) -> Select[Any]:
        query = query.where(FinanceLesson.module == module)
        if difficulty is not None:
            query = query.where(FinanceLesson.difficulty == difficulty)
        if is_published is not None:
            query = query.where(FinanceLesson.is_published == is_published)
        return query

    async def get_in_module(self, module: str, lesson_id: UUID) -> FinanceLesson | None:
        """Get a lesson only if it belongs to the given module."""
        result = await self.session.execute(
            select(FinanceLesson).where(
                FinanceLesson.id == lesson_id, FinanceLesson.module == module
            )
        )
        return result.scalar_one_or_none()

    async def count_matching(
        self,
        module: str,
        *,
        difficulty: str | None = None,
        is_published: bool | None = None,
    ) -> int:
        query = self._filtered(
            select(func.count()).select_from(FinanceLesson),
            module,
            difficulty,
            is_published,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_page(
        self,
        module: str,
        *,
        difficulty: str | None = None,
        is_published: bool | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> list[FinanceLesson]:
        """Fetch one page of a module's lessons, newest first."""
        query = self._filtered(select(FinanceLesson), module, difficulty, is_published)
        result = await self.session.execute(
            query.order_by(FinanceLesson.created_at.desc(), FinanceLesson.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
