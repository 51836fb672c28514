"""LearningContentRepository - filtered listings and owner statistics."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import Select, case, func, select

from finlit.models.content import LearningContent
from finlit.repositories.base import BaseRepository


@dataclass(frozen=True)
class ContentFilter:
    """Optional equality filters for content listings; None means unfiltered."""

    category_slug: str | None = None
    difficulty: str | None = None
    is_published: bool | None = None
    is_public: bool | None = None
    created_by: UUID | None = None


class LearningContentRepository(BaseRepository[LearningContent]):
    """Repository for LearningContent entities."""

    def _filtered(self, query: Select[Any], filters: ContentFilter) -> Select[Any]:
        if filters.category_slug is not None:
            query = query.where(LearningContent.category_slug == filters.category_slug)
        if filters.difficulty is not None:
            query = query.where(LearningContent.difficulty == filters.difficulty)
        if filters.is_published is not None:
            query = query.where(LearningContent.is_published == filters.is_published)
        if filters.is_public is not None:
            query = query.where(LearningContent.is_public == filters.is_public)
        if filters.created_by is not None:
            query = query.where(LearningContent.created_by == filters.created_by)
        return query

    async def count_matching(self, filters: ContentFilter) -> int:
        """Count items matching the filters."""
        query = self._filtered(
            select(func.count()).select_from(LearningContent), filters
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_page(
        self,
        filters: ContentFilter,
        *,
        offset: int = 0,
        limit: int = 10,
    ) -> list[LearningContent]:
        """Fetch one page of matching items, newest first.

        Args:
            filters: Equality filters
            offset: Number of records to skip
            limit: Maximum records to return
        """
        query = self._filtered(select(LearningContent), filters)
        result = await self.session.execute(
            query.order_by(LearningContent.created_at.desc(), LearningContent.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def overview_for_owner(self, owner_id: UUID) -> dict[str, int]:
        """Totals across all items created by a user."""
        result = await self.session.execute(
            select(
                func.count(LearningContent.id),
                func.coalesce(
                    func.sum(case((LearningContent.is_published.is_(True), 1), else_=0)),
                    0,
                ),
                func.coalesce(func.sum(LearningContent.views), 0),
            ).where(LearningContent.created_by == owner_id)
        )
        total, published, views = result.one()

        # Embedded JSON lists are counted client-side to stay dialect neutral
        videos_result = await self.session.execute(
            select(LearningContent.videos).where(LearningContent.created_by == owner_id)
        )
        total_videos = sum(len(videos or []) for videos in videos_result.scalars())

        return {
            "total_content": int(total),
            "published_content": int(published),
            "total_videos": total_videos,
            "total_views": int(views),
        }

    async def category_breakdown(self, owner_id: UUID) -> list[dict[str, Any]]:
        """Item and view counts per category, most viewed first."""
        total_views = func.coalesce(func.sum(LearningContent.views), 0)
        result = await self.session.execute(
            select(
                LearningContent.category_slug,
                func.count(LearningContent.id),
                total_views,
            )
            .where(LearningContent.created_by == owner_id)
            .group_by(LearningContent.category_slug)
            .order_by(total_views.desc(), LearningContent.category_slug)
        )
        return [
            {"category_slug": slug, "count": int(count), "total_views": int(views)}
            for slug, count, views in result.all()
        ]

    async def difficulty_breakdown(self, owner_id: UUID) -> list[dict[str, Any]]:
        """Item counts per difficulty level."""
        result = await self.session.execute(
            select(LearningContent.difficulty, func.count(LearningContent.id))
            .where(LearningContent.created_by == owner_id)
            .group_by(LearningContent.difficulty)
            .order_by(LearningContent.difficulty)
        )
        return [
            {"difficulty": difficulty, "count": int(count)}
            for difficulty, count in result.all()
        ]

    async def increment_views(self, content: LearningContent) -> LearningContent:
        """Bump the authoritative view counter by one."""
        return await self.update(content, {"views": content.views + 1})
