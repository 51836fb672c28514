"""Learning content and video API schemas."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from finlit.models.base import Difficulty
from finlit.schemas.common import BaseSchema, PaginationMeta, UUIDTimestampMixin

# =============================================================================
# Embedded objects
# =============================================================================


class ResourceLink(BaseSchema):
    """Supplementary resource attached to a content item."""

    title: str = Field(..., min_length=1, max_length=200)
    type: Literal["pdf", "link", "document", "other"] = "link"
    url: str | None = Field(None, max_length=1000)
    description: str | None = None


class AttachedVideo(BaseSchema):
    """Video embedded in a content item."""

    video_id: UUID
    title: str
    description: str = ""
    duration: float | None = None
    thumbnail: str | None = None
    order: int = 0
    is_active: bool = True
    added_at: datetime | None = None


# =============================================================================
# Requests
# =============================================================================


class ContentCreate(BaseSchema):
    """Request body for creating learning content.

    ``category`` is the older request format: either a slug string or an
    object with a ``slug`` key. It is only consulted when ``category_slug``
    is absent.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    body: str | None = Field(None, max_length=10000)
    category_slug: str | None = Field(None, min_length=1, max_length=100)
    category: str | dict[str, Any] | None = Field(None, exclude=True)
    difficulty: Difficulty = Difficulty.BEGINNER
    estimated_time: int | None = Field(None, ge=1, description="Minutes to complete")
    tags: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    resources: list[ResourceLink] = Field(default_factory=list)
    is_published: bool = False
    is_public: bool = True

    @model_validator(mode="after")
    def resolve_category_slug(self) -> "ContentCreate":
        if not self.category_slug:
            if isinstance(self.category, str) and self.category.strip():
                self.category_slug = self.category.strip()
            elif isinstance(self.category, dict) and self.category.get("slug"):
                self.category_slug = str(self.category["slug"]).strip()
        if not self.category_slug:
            raise ValueError("category_slug is required")
        for objective in self.learning_objectives:
            if len(objective) > 200:
                raise ValueError("Learning objective cannot exceed 200 characters")
        return self


class ContentUpdate(BaseSchema):
    """Partial update for learning content; only provided fields change."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    body: str | None = Field(None, max_length=10000)
    category_slug: str | None = Field(None, min_length=1, max_length=100)
    difficulty: Difficulty | None = None
    estimated_time: int | None = Field(None, ge=1)
    tags: list[str] | None = None
    prerequisites: list[str] | None = None
    learning_objectives: list[str] | None = None
    resources: list[ResourceLink] | None = None
    is_published: bool | None = None
    is_public: bool | None = None

    @field_validator(
        "title",
        "category_slug",
        "difficulty",
        "tags",
        "prerequisites",
        "learning_objectives",
        "resources",
        "is_published",
        "is_public",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("cannot be null")
        return value


class VideoAttachRequest(BaseSchema):
    """Request body for attaching a catalogue video to a content item."""

    video_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=500)
    order: int | None = Field(None, ge=0)


class VideoCreate(BaseSchema):
    """Request body for registering video metadata."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    url: str = Field(..., min_length=1, max_length=1000)
    duration: float | None = Field(None, ge=0, description="Seconds")
    format: str | None = Field(None, max_length=20)
    size: int | None = Field(None, ge=0, description="Bytes")


class VideoUpdate(BaseSchema):
    """Partial update of video metadata."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    url: str | None = Field(None, min_length=1, max_length=1000)
    duration: float | None = Field(None, ge=0, description="Seconds")
    format: str | None = Field(None, max_length=20)
    size: int | None = Field(None, ge=0, description="Bytes")

    @field_validator("title", "url")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("cannot be null")
        return value


# =============================================================================
# Responses
# =============================================================================


class VideoResponse(UUIDTimestampMixin, BaseSchema):
    title: str
    description: str | None = None
    url: str
    duration: float | None = None
    format: str | None = None
    size: int | None = None
    uploaded_by: UUID


class ContentResponse(UUIDTimestampMixin, BaseSchema):
    """A learning content item as returned by the API and cached."""

    title: str
    description: str | None = None
    body: str | None = None
    category_slug: str
    difficulty: str
    estimated_time: int | None = None
    tags: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    resources: list[ResourceLink] = Field(default_factory=list)
    videos: list[AttachedVideo] = Field(default_factory=list)
    created_by: UUID
    is_published: bool
    is_public: bool
    views: int = 0
    rating_average: float = 0.0
    rating_count: int = 0
    total_videos: int = 0
    total_duration: float = 0


class VideoPage(BaseModel):
    """One page of a user's video catalogue."""

    videos: list[VideoResponse]
    pagination: PaginationMeta


class ContentPage(BaseModel):
    """One page of a content listing."""

    category_slug: str | None = None
    content: list[ContentResponse]
    pagination: PaginationMeta


class StatsOverview(BaseModel):
    total_content: int = 0
    published_content: int = 0
    total_videos: int = 0
    total_views: int = 0


class CategoryStats(BaseModel):
    category_slug: str
    count: int
    total_views: int


class DifficultyStats(BaseModel):
    difficulty: str
    count: int


class LearningStats(BaseModel):
    """Dashboard statistics for the content a user created."""

    overview: StatsOverview
    category_breakdown: list[CategoryStats]
    difficulty_breakdown: list[DifficultyStats]
