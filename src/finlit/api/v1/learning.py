"""Learning content endpoints.

Cached reads return ``{"success": true, "data": ..., "from_cache": bool}``;
writes invalidate the affected cache namespaces before responding.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from finlit.core.logging import get_logger
from finlit.dependencies import (
    ContentServiceDep,
    CurrentUserDep,
    OptionalUserDep,
    parse_uuid,
)
from finlit.models.base import Difficulty
from finlit.schemas.common import DataResponse, ErrorResponse, MutationResponse
from finlit.schemas.content import ContentCreate, ContentUpdate, VideoAttachRequest

logger = get_logger(__name__)

router = APIRouter()

PageQuery = Annotated[int, Query(description="Page number (values below 1 mean 1)")]
LimitQuery = Annotated[
    int | None, Query(description="Items per page (default 10, capped at 100)")
]
DifficultyQuery = Annotated[Difficulty | None, Query(description="Difficulty filter")]


# =============================================================================
# Listings
# =============================================================================


@router.post(
    "/content",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create learning content",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Missing identity"},
    },
)
async def create_content(
    request: ContentCreate,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    data = await service.create(request, user_id)
    return MutationResponse(message="Learning content created successfully", data=data)


@router.get(
    "/content",
    response_model=DataResponse,
    summary="List all learning content",
    description="Administrative listing across categories with optional filters.",
)
async def list_content(
    _: CurrentUserDep,
    service: ContentServiceDep,
    page: PageQuery = 1,
    limit: LimitQuery = None,
    category_slug: Annotated[str | None, Query(alias="category")] = None,
    difficulty: DifficultyQuery = None,
    is_published: Annotated[bool | None, Query(alias="isPublished")] = None,
    created_by: Annotated[str | None, Query(alias="createdBy")] = None,
) -> DataResponse:
    result = await service.list_all(
        page=page,
        limit=limit,
        category_slug=category_slug,
        difficulty=difficulty,
        is_published=is_published,
        created_by=parse_uuid(created_by, "createdBy") if created_by else None,
    )
    return DataResponse(data=result.data, from_cache=result.from_cache)


@router.get(
    "/content/category/{category_slug}",
    response_model=DataResponse,
    summary="List content in a category",
)
async def list_category_content(
    category_slug: str,
    service: ContentServiceDep,
    page: PageQuery = 1,
    limit: LimitQuery = None,
    difficulty: DifficultyQuery = None,
    is_published: Annotated[bool, Query(alias="isPublished")] = True,
) -> DataResponse:
    """Public, published content of one category, newest first."""
    result = await service.list_by_category(
        category_slug,
        page=page,
        limit=limit,
        difficulty=difficulty,
        is_published=is_published,
    )
    return DataResponse(data=result.data, from_cache=result.from_cache)


@router.get(
    "/stats",
    response_model=DataResponse,
    summary="Learning statistics for the current user",
)
async def get_stats(
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> DataResponse:
    result = await service.get_stats(user_id)
    return DataResponse(data=result.data, from_cache=result.from_cache)


# =============================================================================
# Single item
# =============================================================================


@router.get(
    "/content/{content_id}",
    response_model=DataResponse,
    summary="Get learning content",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed id"},
        404: {"model": ErrorResponse, "description": "Content not found"},
    },
)
async def get_content(
    content_id: str,
    viewer_id: OptionalUserDep,
    service: ContentServiceDep,
) -> DataResponse:
    """Fetch one item; every call counts a view."""
    result = await service.get_by_id(parse_uuid(content_id, "content_id"), viewer_id)
    return DataResponse(data=result.data, from_cache=result.from_cache)


@router.put(
    "/content/{content_id}",
    response_model=MutationResponse,
    summary="Update learning content",
    responses={
        403: {"model": ErrorResponse, "description": "Not the owner"},
        404: {"model": ErrorResponse, "description": "Content not found"},
    },
)
async def update_content(
    content_id: str,
    request: ContentUpdate,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    data = await service.update(parse_uuid(content_id, "content_id"), request, user_id)
    return MutationResponse(message="Learning content updated successfully", data=data)


@router.delete(
    "/content/{content_id}",
    response_model=MutationResponse,
    summary="Delete learning content",
    responses={
        403: {"model": ErrorResponse, "description": "Not the owner"},
        404: {"model": ErrorResponse, "description": "Content not found"},
    },
)
async def delete_content(
    content_id: str,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    await service.delete(parse_uuid(content_id, "content_id"), user_id)
    return MutationResponse(message="Learning content deleted successfully")


# =============================================================================
# Attached videos
# =============================================================================


@router.post(
    "/content/{content_id}/videos",
    response_model=MutationResponse,
    summary="Attach a video",
    responses={
        400: {"model": ErrorResponse, "description": "Video already attached"},
        404: {"model": ErrorResponse, "description": "Content or video not found"},
    },
)
async def add_video(
    content_id: str,
    request: VideoAttachRequest,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    data = await service.add_video(parse_uuid(content_id, "content_id"), request, user_id)
    return MutationResponse(message="Video added to content successfully", data=data)


@router.delete(
    "/content/{content_id}/videos/{video_id}",
    response_model=MutationResponse,
    summary="Detach a video",
    responses={
        404: {"model": ErrorResponse, "description": "Video not attached"},
    },
)
async def remove_video(
    content_id: str,
    video_id: str,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    data = await service.remove_video(
        parse_uuid(content_id, "content_id"),
        parse_uuid(video_id, "video_id"),
        user_id,
    )
    return MutationResponse(message="Video removed from content successfully", data=data)
