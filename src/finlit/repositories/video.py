"""VideoRepository for the video catalogue."""

from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, or_, select

from finlit.models.video import Video
from finlit.repositories.base import BaseRepository


class VideoRepository(BaseRepository[Video]):
    """Repository for Video entities."""

    @staticmethod
    def _for_uploader(
        query: Select[Any], uploaded_by: UUID, search: str | None
    ) -> Select[Any]:
        query = query.where(Video.uploaded_by == uploaded_by)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(Video.title.ilike(pattern), Video.description.ilike(pattern))
            )
        return query

    async def count_for_uploader(
        self, uploaded_by: UUID, search: str | None = None
    ) -> int:
        """Count videos registered by a user, optionally matching a search term."""
        query = self._for_uploader(
            select(func.count()).select_from(Video), uploaded_by, search
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_page_for_uploader(
        self,
        uploaded_by: UUID,
        search: str | None = None,
        *,
        offset: int = 0,
        limit: int = 10,
    ) -> list[Video]:
        """Fetch one page of a user's videos, newest first."""
        query = self._for_uploader(select(Video), uploaded_by, search)
        result = await self.session.execute(
            query.order_by(Video.created_at.desc(), Video.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all())
