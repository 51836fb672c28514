"""Custom exception hierarchy for FinLit.

Every domain error carries a machine-readable code, a human message, an HTTP
status and optional details, so the API layer can render a uniform error body.

Cache failures are deliberately absent from this hierarchy: the cache layer
swallows its own errors and never raises into request handling.

Usage:
    from finlit.core.exceptions import ContentNotFoundError

    raise ContentNotFoundError(content_id=str(content_id))
"""

from typing import Any


class FinLitError(Exception):
    """Base exception for all FinLit errors.

    Attributes:
        code: Machine-readable error code (e.g., "CONTENT_NOT_FOUND")
        message: Human-readable error message
        status_code: HTTP status code to return
        details: Additional error details (optional)
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert exception to API error response format.

        Args:
            request_id: Request correlation ID

        Returns:
            Error response dictionary
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if request_id:
            error["request_id"] = request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(FinLitError):
    """Base class for resource not found errors."""

    status_code: int = 404


class ContentNotFoundError(NotFoundError):
    """Raised when a learning content item cannot be found."""

    code: str = "CONTENT_NOT_FOUND"
    message: str = "Learning content not found"

    def __init__(self, content_id: str | None = None, message: str | None = None) -> None:
        details: dict[str, Any] = {}
        if content_id:
            details["content_id"] = content_id
        super().__init__(message=message, details=details or None)


class VideoNotFoundError(NotFoundError):
    """Raised when a video does not exist in the catalogue."""

    code: str = "VIDEO_NOT_FOUND"
    message: str = "Video not found"

    def __init__(self, video_id: str | None = None, message: str | None = None) -> None:
        details: dict[str, Any] = {}
        if video_id:
            details["video_id"] = video_id
        super().__init__(message=message, details=details or None)


class VideoNotAttachedError(NotFoundError):
    """Raised when removing a video that the content item does not contain."""

    code: str = "VIDEO_NOT_ATTACHED"
    message: str = "Video not found in this content"

    def __init__(self, content_id: str, video_id: str) -> None:
        super().__init__(details={"content_id": content_id, "video_id": video_id})


class LessonNotFoundError(NotFoundError):
    """Raised when a finance lesson cannot be found in its module."""

    code: str = "LESSON_NOT_FOUND"
    message: str = "Finance lesson not found"

    def __init__(self, module: str, lesson_id: str) -> None:
        super().__init__(
            message=f"Lesson {lesson_id} not found in {module}",
            details={"module": module, "lesson_id": lesson_id},
        )


class UnknownModuleError(NotFoundError):
    """Raised for a finance module slug that is not served."""

    code: str = "UNKNOWN_MODULE"
    message: str = "Unknown finance learning module"

    def __init__(self, module: str) -> None:
        super().__init__(
            message=f"Unknown finance learning module: {module}",
            details={"module": module},
        )


# =============================================================================
# Authentication & Authorization Errors (401, 403)
# =============================================================================


class AuthenticationError(FinLitError):
    """Raised when the caller identity is missing or malformed."""

    code: str = "AUTHENTICATION_FAILED"
    message: str = "Authentication required"
    status_code: int = 401


class AuthorizationError(FinLitError):
    """Raised when user lacks permission for an action."""

    code: str = "AUTHORIZATION_FAILED"
    message: str = "You do not have permission to perform this action"
    status_code: int = 403


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(FinLitError):
    """Raised when input validation fails."""

    code: str = "VALIDATION_ERROR"
    message: str = "Validation error"
    status_code: int = 400

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if details is None:
            details = {}
        if field:
            details["field"] = field
        super().__init__(message=message, details=details or None)


class InvalidIdentifierError(ValidationError):
    """Raised when a path or query identifier is not a valid UUID."""

    code: str = "INVALID_IDENTIFIER"
    message: str = "Invalid identifier format"

    def __init__(self, field: str, value: str) -> None:
        super().__init__(
            message=f"Invalid {field} format",
            field=field,
            details={"value": value},
        )


class DuplicateVideoError(ValidationError):
    """Raised when a video is attached twice to the same content item."""

    code: str = "DUPLICATE_VIDEO"
    message: str = "Video is already in this content"

    def __init__(self, content_id: str, video_id: str) -> None:
        super().__init__(details={"content_id": content_id, "video_id": video_id})
