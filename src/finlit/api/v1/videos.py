"""Video catalogue endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from finlit.dependencies import ContentServiceDep, CurrentUserDep, parse_uuid
from finlit.schemas.common import DataResponse, ErrorResponse, MutationResponse
from finlit.schemas.content import VideoCreate, VideoUpdate

router = APIRouter()

OWNER_ERRORS = {
    403: {"model": ErrorResponse, "description": "Not the uploader"},
    404: {"model": ErrorResponse, "description": "Video not found"},
}


@router.post(
    "",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register video metadata",
)
async def register_video(
    request: VideoCreate,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    data = await service.register_video(request, user_id)
    return MutationResponse(message="Video registered successfully", data=data)


@router.get(
    "",
    response_model=DataResponse,
    summary="List my videos",
)
async def list_videos(
    user_id: CurrentUserDep,
    service: ContentServiceDep,
    page: Annotated[int, Query(description="Page number (values below 1 mean 1)")] = 1,
    limit: Annotated[int | None, Query(description="Items per page")] = None,
    search: Annotated[
        str | None, Query(description="Match against title or description")
    ] = None,
) -> DataResponse:
    data = await service.list_videos(user_id, page=page, limit=limit, search=search)
    return DataResponse(data=data)


@router.get(
    "/{video_id}",
    response_model=DataResponse,
    summary="Get video metadata",
    responses={404: {"model": ErrorResponse, "description": "Video not found"}},
)
async def get_video(video_id: str, service: ContentServiceDep) -> DataResponse:
    data = await service.get_video(parse_uuid(video_id, "video_id"))
    return DataResponse(data=data)


@router.put(
    "/{video_id}",
    response_model=MutationResponse,
    summary="Update video metadata",
    responses=OWNER_ERRORS,
)
async def update_video(
    video_id: str,
    request: VideoUpdate,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    data = await service.update_video(parse_uuid(video_id, "video_id"), request, user_id)
    return MutationResponse(message="Video updated successfully", data=data)


@router.delete(
    "/{video_id}",
    response_model=MutationResponse,
    summary="Delete video metadata",
    responses=OWNER_ERRORS,
)
async def delete_video(
    video_id: str,
    user_id: CurrentUserDep,
    service: ContentServiceDep,
) -> MutationResponse:
    await service.delete_video(parse_uuid(video_id, "video_id"), user_id)
    return MutationResponse(message="Video deleted successfully")
