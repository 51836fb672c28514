"""API v1 main router.

Aggregates all v1 API routers into a single router for inclusion in the app.
"""

from fastapi import APIRouter

from finlit.api.v1.cache import router as cache_router
from finlit.api.v1.finance import router as finance_router
from finlit.api.v1.learning import router as learning_router
from finlit.api.v1.videos import router as videos_router

router = APIRouter()

# Include sub-routers
router.include_router(learning_router, prefix="/learning", tags=["Learning"])
router.include_router(videos_router, prefix="/videos", tags=["Videos"])
router.include_router(finance_router, prefix="/finance", tags=["Finance"])
router.include_router(cache_router, prefix="/cache", tags=["Cache"])
