"""Learning content service.

Reads go through the cache with ``cached_fetch``; writes mutate the database,
commit, and only then invalidate every cache entry that could hold the old
state.

Usage:
    ```python
    service = ContentService(content_repo, video_repo, cache, settings)
    result = await service.list_by_category("budgeting", page=1, limit=10)
    result.data, result.from_cache
    ```
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog

from finlit.cache import CachedResult, CacheKeys, CacheService, cached_fetch
from finlit.config import Settings
from finlit.core.exceptions import (
    AuthorizationError,
    ContentNotFoundError,
    DuplicateVideoError,
    VideoNotAttachedError,
    VideoNotFoundError,
)
from finlit.models.content import LearningContent
from finlit.models.video import Video
from finlit.repositories.content import ContentFilter, LearningContentRepository
from finlit.repositories.video import VideoRepository
from finlit.schemas.common import PaginationMeta, normalize_page
from finlit.schemas.content import (
    ContentCreate,
    ContentPage,
    ContentResponse,
    ContentUpdate,
    LearningStats,
    VideoAttachRequest,
    VideoCreate,
    VideoPage,
    VideoResponse,
    VideoUpdate,
)
from finlit.services.views import ViewCounter

logger = structlog.get_logger(__name__)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def serialize_content(content: LearningContent) -> dict[str, Any]:
    """JSON-shaped representation used both for responses and cache entries."""
    return ContentResponse.model_validate(content).model_dump(mode="json")


class ContentService:
    """Service for learning content and the video catalogue."""

    def __init__(
        self,
        content_repo: LearningContentRepository,
        video_repo: VideoRepository,
        cache: CacheService,
        settings: Settings,
    ) -> None:
        """Initialize the service.

        Args:
            content_repo: Repository for LearningContent entities
            video_repo: Repository for Video entities
            cache: Cache facade
            settings: TTL and pagination policy
        """
        self.content_repo = content_repo
        self.video_repo = video_repo
        self.cache = cache
        self.settings = settings
        self.views = ViewCounter(cache)

    def _page_window(self, page: int | None, limit: int | None) -> tuple[int, int]:
        return normalize_page(
            page,
            limit,
            default_limit=self.settings.default_page_size,
            max_limit=self.settings.max_page_size,
        )

    async def _load_page(
        self,
        filters: ContentFilter,
        page: int,
        limit: int,
    ) -> dict[str, Any]:
        total = await self.content_repo.count_matching(filters)
        items = await self.content_repo.find_page(
            filters, offset=(page - 1) * limit, limit=limit
        )
        return ContentPage(
            category_slug=filters.category_slug,
            content=[ContentResponse.model_validate(item) for item in items],
            pagination=PaginationMeta.from_counts(page, limit, total),
        ).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    async def list_by_category(
        self,
        category_slug: str,
        *,
        page: int | None = 1,
        limit: int | None = None,
        difficulty: str | None = None,
        is_published: bool = True,
    ) -> CachedResult:
        """Public listing of one category's content."""
        page, limit = self._page_window(page, limit)
        difficulty = _enum_value(difficulty)
        filters = ContentFilter(
            category_slug=category_slug,
            difficulty=difficulty,
            is_published=is_published,
            is_public=True,
        )
        key = CacheKeys.category_page(category_slug, page, limit, difficulty, is_published)
        return await cached_fetch(
            self.cache,
            key,
            lambda: self._load_page(filters, page, limit),
            self.settings.cache_ttl_category_page,
        )

    async def list_all(
        self,
        *,
        page: int | None = 1,
        limit: int | None = None,
        category_slug: str | None = None,
        difficulty: str | None = None,
        is_published: bool | None = None,
        created_by: UUID | None = None,
    ) -> CachedResult:
        """Administrative listing across every category."""
        page, limit = self._page_window(page, limit)
        difficulty = _enum_value(difficulty)
        filters = ContentFilter(
            category_slug=category_slug,
            difficulty=difficulty,
            is_published=is_published,
            created_by=created_by,
        )
        key = CacheKeys.all_content_page(
            page, limit, category_slug, difficulty, is_published, created_by
        )
        return await cached_fetch(
            self.cache,
            key,
            lambda: self._load_page(filters, page, limit),
            self.settings.cache_ttl_all_content_page,
        )

    async def get_by_id(
        self, content_id: UUID, viewer_id: UUID | None = None
    ) -> CachedResult:
        """Fetch one item and count the view.

        A cache hit counts the view in the cache hash and reports that
        counter; a miss increments the database counter, caches the fresh
        document and reseeds the hash from it.

        Raises:
            ContentNotFoundError: Unknown id, or private content of another user
        """
        key = CacheKeys.content(content_id)

        cached = await self.cache.get(key)
        if cached is not None:
            self._ensure_visible(cached, content_id, viewer_id)
            views = await self.views.record_view(content_id)
            if views <= 0:
                views = await self.views.current(content_id)
            if views is not None:
                cached["views"] = views
            return CachedResult(data=cached, from_cache=True)

        content = await self.content_repo.get_by_id(content_id)
        if content is None:
            raise ContentNotFoundError(str(content_id))
        self._ensure_visible(serialize_content(content), content_id, viewer_id)

        content = await self.content_repo.increment_views(content)
        await self.content_repo.commit()
        payload = serialize_content(content)

        await self.cache.set(key, payload, self.settings.cache_ttl_document)
        await self.views.seed(content_id, content.views)
        return CachedResult(data=payload, from_cache=False)

    @staticmethod
    def _ensure_visible(
        payload: dict[str, Any], content_id: UUID, viewer_id: UUID | None
    ) -> None:
        if payload.get("is_public", True):
            return
        if viewer_id is not None and payload.get("created_by") == str(viewer_id):
            return
        raise ContentNotFoundError(str(content_id))

    async def get_stats(self, user_id: UUID) -> CachedResult:
        """Dashboard statistics for the content a user created."""

        async def load() -> dict[str, Any]:
            return LearningStats(
                overview=await self.content_repo.overview_for_owner(user_id),
                category_breakdown=await self.content_repo.category_breakdown(user_id),
                difficulty_breakdown=await self.content_repo.difficulty_breakdown(
                    user_id
                ),
            ).model_dump(mode="json")

        return await cached_fetch(
            self.cache, CacheKeys.stats(user_id), load, self.settings.cache_ttl_stats
        )

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    async def _get_owned(self, content_id: UUID, user_id: UUID) -> LearningContent:
        content = await self.content_repo.get_by_id(content_id)
        if content is None:
            raise ContentNotFoundError(str(content_id))
        if content.created_by != user_id:
            logger.warning(
                "content_access_denied",
                content_id=str(content_id),
                user_id=str(user_id),
            )
            raise AuthorizationError()
        return content

    async def _invalidate(
        self,
        owner_id: UUID,
        *category_slugs: str,
        content_id: UUID | None = None,
    ) -> None:
        await self.cache.delete_pattern(CacheKeys.listing_namespace())
        for slug in dict.fromkeys(category_slugs):
            await self.cache.delete_pattern(CacheKeys.category_namespace(slug))
        await self.cache.delete(CacheKeys.stats(owner_id))
        if content_id is not None:
            await self.cache.delete(CacheKeys.content(content_id))

    async def create(self, data: ContentCreate, user_id: UUID) -> dict[str, Any]:
        """Create a content item owned by ``user_id``."""
        content = LearningContent(
            **data.model_dump(mode="json", exclude={"category"}),
            videos=[],
            created_by=user_id,
        )
        content = await self.content_repo.create(content)
        await self.content_repo.commit()

        await self._invalidate(user_id, content.category_slug)
        logger.info(
            "content_created",
            content_id=str(content.id),
            category_slug=content.category_slug,
            user_id=str(user_id),
        )
        return serialize_content(content)

    async def update(
        self, content_id: UUID, data: ContentUpdate, user_id: UUID
    ) -> dict[str, Any]:
        """Apply a partial update; both the old and new category are purged."""
        content = await self._get_owned(content_id, user_id)
        previous_category = content.category_slug

        content = await self.content_repo.update(
            content, data.model_dump(mode="json", exclude_unset=True)
        )
        await self.content_repo.commit()

        await self._invalidate(
            user_id, previous_category, content.category_slug, content_id=content_id
        )
        logger.info("content_updated", content_id=str(content_id))
        return serialize_content(content)

    async def delete(self, content_id: UUID, user_id: UUID) -> None:
        content = await self._get_owned(content_id, user_id)
        category_slug = content.category_slug

        await self.content_repo.delete(content)
        await self.content_repo.commit()

        await self._invalidate(user_id, category_slug, content_id=content_id)
        await self.cache.delete(CacheKeys.content_views(content_id))
        logger.info("content_deleted", content_id=str(content_id))

    async def add_video(
        self, content_id: UUID, request: VideoAttachRequest, user_id: UUID
    ) -> dict[str, Any]:
        """Attach a catalogue video to a content item.

        Raises:
            VideoNotFoundError: The video is not in the catalogue
            DuplicateVideoError: The video is already attached
        """
        content = await self._get_owned(content_id, user_id)

        video = await self.video_repo.get_by_id(request.video_id)
        if video is None:
            raise VideoNotFoundError(str(request.video_id))
        if content.find_video(request.video_id) is not None:
            raise DuplicateVideoError(str(content_id), str(request.video_id))

        entry = {
            "video_id": str(video.id),
            "title": request.title,
            "description": request.description,
            "duration": video.duration,
            "thumbnail": None,
            "order": request.order if request.order is not None else len(content.videos),
            "is_active": True,
            "added_at": datetime.now(timezone.utc).isoformat(),
        }
        videos = sorted([*content.videos, entry], key=lambda v: v.get("order", 0))
        content = await self.content_repo.update(content, {"videos": videos})
        await self.content_repo.commit()

        await self._invalidate(user_id, content.category_slug, content_id=content_id)
        logger.info(
            "content_video_added", content_id=str(content_id), video_id=str(video.id)
        )
        return serialize_content(content)

    async def remove_video(
        self, content_id: UUID, video_id: UUID, user_id: UUID
    ) -> dict[str, Any]:
        content = await self._get_owned(content_id, user_id)

        index = content.find_video(video_id)
        if index is None:
            raise VideoNotAttachedError(str(content_id), str(video_id))

        videos = [v for i, v in enumerate(content.videos) if i != index]
        content = await self.content_repo.update(content, {"videos": videos})
        await self.content_repo.commit()

        await self._invalidate(user_id, content.category_slug, content_id=content_id)
        logger.info(
            "content_video_removed", content_id=str(content_id), video_id=str(video_id)
        )
        return serialize_content(content)

    # -------------------------------------------------------------------------
    # Video catalogue
    # -------------------------------------------------------------------------

    async def register_video(self, data: VideoCreate, user_id: UUID) -> dict[str, Any]:
        video = await self.video_repo.create(Video(**data.model_dump(), uploaded_by=user_id))
        await self.video_repo.commit()
        logger.info("video_registered", video_id=str(video.id))
        return VideoResponse.model_validate(video).model_dump(mode="json")

    async def get_video(self, video_id: UUID) -> dict[str, Any]:
        video = await self.video_repo.get_by_id(video_id)
        if video is None:
            raise VideoNotFoundError(str(video_id))
        return VideoResponse.model_validate(video).model_dump(mode="json")

    async def list_videos(
        self,
        user_id: UUID,
        *,
        page: int | None = 1,
        limit: int | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        """Page through the videos a user has registered, newest first."""
        page, limit = self._page_window(page, limit)
        total = await self.video_repo.count_for_uploader(user_id, search)
        videos = await self.video_repo.find_page_for_uploader(
            user_id, search, offset=(page - 1) * limit, limit=limit
        )
        return VideoPage(
            videos=[VideoResponse.model_validate(video) for video in videos],
            pagination=PaginationMeta.from_counts(page, limit, total),
        ).model_dump(mode="json")

    async def update_video(
        self, video_id: UUID, data: VideoUpdate, user_id: UUID
    ) -> dict[str, Any]:
        video = await self._get_owned_video(video_id, user_id)
        video = await self.video_repo.update(video, data.model_dump(exclude_unset=True))
        await self.video_repo.commit()
        logger.info("video_updated", video_id=str(video_id))
        return VideoResponse.model_validate(video).model_dump(mode="json")

    async def delete_video(self, video_id: UUID, user_id: UUID) -> None:
        """Remove a catalogue entry.

        Entries already attached to content keep their embedded snapshot.
        """
        video = await self._get_owned_video(video_id, user_id)
        await self.video_repo.delete(video)
        await self.video_repo.commit()
        logger.info("video_deleted", video_id=str(video_id))

    async def _get_owned_video(self, video_id: UUID, user_id: UUID) -> Video:
        video = await self.video_repo.get_by_id(video_id)
        if video is None:
            raise VideoNotFoundError(str(video_id))
        if video.uploaded_by != user_id:
            logger.warning(
                "video_access_denied", video_id=str(video_id), user_id=str(user_id)
            )
            raise AuthorizationError()
        return video
