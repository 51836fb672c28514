"""Models package for FinLit.

This module exports the Base class and all model classes.
"""

from finlit.models.base import (
    Base,
    Difficulty,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from finlit.models.content import LearningContent
from finlit.models.finance import FinanceLesson, FinanceModule
from finlit.models.video import Video

__all__ = [
    # Base and Mixins
    "Base",
    "Difficulty",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    # Learning content
    "LearningContent",
    "Video",
    # Finance modules
    "FinanceLesson",
    "FinanceModule",
]
