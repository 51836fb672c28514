"""Finance learning module schemas."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from finlit.models.base import Difficulty
from finlit.schemas.common import BaseSchema, PaginationMeta, UUIDTimestampMixin


class LessonCreate(BaseSchema):
    """Request body for creating a lesson in a finance module.

    Video title and description default to the lesson's own title and
    description when omitted.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    body: str = Field(..., min_length=1)
    detailed_body: str | None = None
    video_url: str = Field(..., min_length=1, max_length=1000)
    video_title: str | None = Field(None, max_length=200)
    video_description: str | None = Field(None, max_length=1000)
    difficulty: Difficulty = Difficulty.BEGINNER
    estimated_time: int | None = Field(None, ge=1)
    tags: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    is_published: bool = True


class LessonUpdate(BaseSchema):
    """Partial update for a finance lesson."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=1000)
    body: str | None = Field(None, min_length=1)
    detailed_body: str | None = None
    video_url: str | None = Field(None, min_length=1, max_length=1000)
    video_title: str | None = Field(None, max_length=200)
    video_description: str | None = Field(None, max_length=1000)
    difficulty: Difficulty | None = None
    estimated_time: int | None = Field(None, ge=1)
    tags: list[str] | None = None
    prerequisites: list[str] | None = None
    learning_objectives: list[str] | None = None
    is_published: bool | None = None

    @field_validator(
        "title",
        "description",
        "body",
        "video_url",
        "difficulty",
        "tags",
        "prerequisites",
        "learning_objectives",
        "is_published",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("cannot be null")
        return value


class LessonResponse(UUIDTimestampMixin, BaseSchema):
    module: str
    title: str
    description: str
    body: str
    detailed_body: str | None = None
    video_url: str
    video_title: str | None = None
    video_description: str | None = None
    difficulty: str
    estimated_time: int | None = None
    tags: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    is_published: bool
    created_by: UUID
    views: int = 0


class LessonPage(BaseModel):
    module: str
    content: list[LessonResponse]
    pagination: PaginationMeta
