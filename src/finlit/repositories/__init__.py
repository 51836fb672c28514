"""Repository pattern package for FinLit.

This module exports base repository classes and concrete repositories.
"""

from finlit.repositories.base import BaseRepository
from finlit.repositories.content import ContentFilter, LearningContentRepository
from finlit.repositories.finance import FinanceLessonRepository
from finlit.repositories.video import VideoRepository

__all__ = [
    # Base
    "BaseRepository",
    # Learning content
    "ContentFilter",
    "LearningContentRepository",
    "VideoRepository",
    # Finance modules
    "FinanceLessonRepository",
]
