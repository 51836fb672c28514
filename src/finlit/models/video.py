"""Video model - catalogue entry for an uploaded video.

Only metadata lives here; the media itself sits with the external media host.
"""

import uuid

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from finlit.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Video(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Video metadata referenced by learning content items."""

    __tablename__ = "videos"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    format: Mapped[str | None] = mapped_column(String(20), nullable=True)
    size: Mapped[int | None] = mapped_column(nullable=True)
    uploaded_by: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, title='{self.title}')>"
