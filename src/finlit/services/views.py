"""View-count accelerator backed by a cache hash counter.

Cached documents are served without touching the database, so their views
are counted in ``learning-content:views:<id>`` instead. The hash lives
independently of the document entry: incrementing it never refreshes or
invalidates the cached document.
"""

from typing import Any

from finlit.cache import CacheKeys, CacheService
from finlit.core.logging import get_logger

logger = get_logger(__name__)

VIEWS_FIELD = "views"


class ViewCounter:
    """Per-document view counter on top of the cache facade."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache

    async def record_view(self, document_id: Any) -> int:
        """Count one view and return the new total (0 if the cache failed)."""
        return await self.cache.hincrby(
            CacheKeys.content_views(document_id), VIEWS_FIELD, 1
        )

    async def seed(self, document_id: Any, views: int) -> None:
        """Reset the counter to the authoritative database value."""
        await self.cache.hset(CacheKeys.content_views(document_id), VIEWS_FIELD, views)
        logger.debug("view_counter_seeded", content_id=str(document_id), views=views)

    async def current(self, document_id: Any) -> int | None:
        return await self.cache.hget(CacheKeys.content_views(document_id), VIEWS_FIELD)
