"""Finance learning module endpoints.

One set of routes serves all five modules; ``{module}`` is the module slug
(finance-basics, sip-learning, mutual-funds, fraud-awareness, tax-planning).
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from finlit.core.logging import get_logger
from finlit.dependencies import CurrentUserDep, FinanceServiceDep, parse_uuid
from finlit.models.base import Difficulty
from finlit.schemas.common import DataResponse, ErrorResponse, MutationResponse
from finlit.schemas.finance import LessonCreate, LessonUpdate

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/{module}",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a lesson",
    responses={404: {"model": ErrorResponse, "description": "Unknown module"}},
)
async def create_lesson(
    module: str,
    request: LessonCreate,
    user_id: CurrentUserDep,
    service: FinanceServiceDep,
) -> MutationResponse:
    data = await service.create_lesson(module, request, user_id)
    return MutationResponse(message="Lesson created successfully", data=data)


@router.get(
    "/{module}",
    response_model=DataResponse,
    summary="List a module's lessons",
    responses={404: {"model": ErrorResponse, "description": "Unknown module"}},
)
async def list_lessons(
    module: str,
    service: FinanceServiceDep,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int | None, Query()] = None,
    difficulty: Annotated[Difficulty | None, Query()] = None,
    is_published: Annotated[bool, Query(alias="isPublished")] = True,
) -> DataResponse:
    result = await service.list_lessons(
        module,
        page=page,
        limit=limit,
        difficulty=difficulty,
        is_published=is_published,
    )
    return DataResponse(data=result.data, from_cache=result.from_cache)


@router.get(
    "/{module}/{lesson_id}",
    response_model=DataResponse,
    summary="Get a lesson",
    responses={404: {"model": ErrorResponse, "description": "Lesson not found"}},
)
async def get_lesson(
    module: str,
    lesson_id: str,
    service: FinanceServiceDep,
) -> DataResponse:
    result = await service.get_lesson(module, parse_uuid(lesson_id, "lesson_id"))
    return DataResponse(data=result.data, from_cache=result.from_cache)


@router.put(
    "/{module}/{lesson_id}",
    response_model=MutationResponse,
    summary="Update a lesson",
)
async def update_lesson(
    module: str,
    lesson_id: str,
    request: LessonUpdate,
    user_id: CurrentUserDep,
    service: FinanceServiceDep,
) -> MutationResponse:
    data = await service.update_lesson(
        module, parse_uuid(lesson_id, "lesson_id"), request, user_id
    )
    return MutationResponse(message="Lesson updated successfully", data=data)


@router.delete(
    "/{module}/{lesson_id}",
    response_model=MutationResponse,
    summary="Delete a lesson",
)
async def delete_lesson(
    module: str,
    lesson_id: str,
    user_id: CurrentUserDep,
    service: FinanceServiceDep,
) -> MutationResponse:
    await service.delete_lesson(module, parse_uuid(lesson_id, "lesson_id"), user_id)
    logger.debug("finance_lesson_delete_request", module=module, lesson_id=lesson_id)
    return MutationResponse(message="Lesson deleted successfully")
