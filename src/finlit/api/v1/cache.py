"""Cache diagnostics endpoint."""

from typing import Any

from fastapi import APIRouter

from finlit.dependencies import CacheDep

router = APIRouter()


@router.get("/status", summary="Cache availability and counters")
async def cache_status(cache: CacheDep) -> dict[str, Any]:
    """Which store is serving requests plus hit/miss/error counters."""
    return {"success": True, "data": cache.stats()}
