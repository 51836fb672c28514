"""Services package for FinLit.

This module exports service classes for business logic.
"""

from finlit.services.content import ContentService, serialize_content
from finlit.services.finance import FinanceLessonService, resolve_module
from finlit.services.views import ViewCounter

__all__ = [
    # Learning content
    "ContentService",
    "serialize_content",
    "ViewCounter",
    # Finance modules
    "FinanceLessonService",
    "resolve_module",
]
