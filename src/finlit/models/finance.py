"""FinanceLesson model - lessons of the financial learning modules.

The five modules (finance basics, SIP learning, mutual funds, fraud
awareness, tax planning) share one schema, so they share one table keyed
by a module discriminator.
"""

import uuid
from enum import Enum

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finlit.models.base import Base, Difficulty, TimestampMixin, UUIDPrimaryKeyMixin


class FinanceModule(str, Enum):
    """Financial learning modules, valued by their URL slug."""

    FINANCE_BASICS = "finance-basics"
    SIP_LEARNING = "sip-learning"
    MUTUAL_FUNDS = "mutual-funds"
    FRAUD_AWARENESS = "fraud-awareness"
    TAX_PLANNING = "tax-planning"


class FinanceLesson(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A single lesson within a finance module."""

    __tablename__ = "finance_lessons"

    module: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    detailed_body: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    video_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    video_description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    difficulty: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Difficulty.BEGINNER.value, index=True
    )
    estimated_time: Mapped[int | None] = mapped_column(nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    prerequisites: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    learning_objectives: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    is_published: Mapped[bool] = mapped_column(nullable=False, default=True, index=True)
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)
    views: Mapped[int] = mapped_column(nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<FinanceLesson(id={self.id}, module='{self.module}', title='{self.title}')>"
