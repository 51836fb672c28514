"""LearningContent model - a lesson grouped under a category.

Attached videos are embedded as a JSON list rather than a join table: they
are always read and written together with their parent item.
"""

import uuid
from typing import Any

from sqlalchemy import JSON, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finlit.models.base import Base, Difficulty, TimestampMixin, UUIDPrimaryKeyMixin


class LearningContent(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A learning content item.

    Attributes:
        title: Display title
        category_slug: Category the item is listed under
        difficulty: beginner, intermediate or advanced
        videos: Attached videos; each entry holds video_id, title,
            description, duration, thumbnail, order, is_active, added_at
        created_by: Owner; only the owner may modify the item
        views: Authoritative view count
    """

    __tablename__ = "learning_content"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_slug: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    difficulty: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Difficulty.BEGINNER.value, index=True
    )
    estimated_time: Mapped[int | None] = mapped_column(nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    prerequisites: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    learning_objectives: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    resources: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    videos: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    is_published: Mapped[bool] = mapped_column(nullable=False, default=False, index=True)
    is_public: Mapped[bool] = mapped_column(nullable=False, default=True, index=True)
    views: Mapped[int] = mapped_column(nullable=False, default=0)
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(nullable=False, default=0)

    @property
    def total_videos(self) -> int:
        return sum(1 for video in self.videos if video.get("is_active", True))

    @property
    def total_duration(self) -> float:
        return sum(
            video.get("duration") or 0
            for video in self.videos
            if video.get("is_active", True)
        )

    def find_video(self, video_id: uuid.UUID) -> int | None:
        """Index of an attached video, or None."""
        for index, video in enumerate(self.videos):
            if video.get("video_id") == str(video_id):
                return index
        return None

    def __repr__(self) -> str:
        return (
            f"<LearningContent(id={self.id}, title='{self.title}', "
            f"category='{self.category_slug}')>"
        )
