"""Common Pydantic schemas used across the API.

This module provides shared schemas for:
- Error responses (consistent error format)
- Pagination (normalisation and the pagination block of list responses)
- Response envelopes carrying cache provenance
- Health checks
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Base Configuration
# =============================================================================


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Allow ORM model conversion
        populate_by_name=True,  # Allow both alias and field name
        str_strip_whitespace=True,  # Strip whitespace from strings
    )


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Details of an error response.

    Attributes:
        code: Machine-readable error code (e.g., "CONTENT_NOT_FOUND")
        message: Human-readable error description
        request_id: Correlation ID for tracing (optional)
        details: Additional error context (optional)
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    request_id: str | None = Field(
        None, description="Request correlation ID for tracing"
    )
    details: dict[str, Any] | None = Field(None, description="Additional error context")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "CONTENT_NOT_FOUND",
                "message": "Learning content not found",
                "request_id": "abc-123-def-456",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail


# =============================================================================
# Pagination
# =============================================================================


def normalize_page(
    page: int | None,
    limit: int | None,
    *,
    default_limit: int = 10,
    max_limit: int = 100,
) -> tuple[int, int]:
    """Clamp raw page/limit query values to a usable window.

    Pages below 1 become page 1; a missing or non-positive limit becomes the
    default; limits above the maximum are capped.
    """
    page = max(1, page or 1)
    if not limit or limit < 1:
        limit = default_limit
    return page, min(limit, max_limit)


class PaginationMeta(BaseModel):
    """Pagination block attached to every list response."""

    current_page: int = Field(..., ge=1, description="Current page number")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    total_content: int = Field(..., ge=0, description="Total items across all pages")
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_counts(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        """Build the block from a normalised page window and a total count."""
        total_pages = (total + limit - 1) // limit if total > 0 else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_content=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


# =============================================================================
# Envelopes
# =============================================================================


class DataResponse(BaseModel):
    """Success envelope for reads that may be served from cache."""

    success: bool = True
    data: Any
    from_cache: bool = Field(
        False, description="True when the payload was served from the cache"
    )


class MutationResponse(BaseModel):
    """Success envelope for writes."""

    success: bool = True
    message: str
    data: Any | None = None


# =============================================================================
# Common Field Types
# =============================================================================


class UUIDTimestampMixin(BaseModel):
    """Mixin for models with UUID primary key and timestamps."""

    id: UUID = Field(..., description="Unique identifier")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")


# =============================================================================
# Health Check Schemas
# =============================================================================


class HealthCheckResponse(BaseModel):
    """Readiness probe response.

    Attributes:
        status: "ok" when every dependency answers, "degraded" when only the
            cache is down, "error" when the database is down
        checks: Individual dependency checks
    """

    status: str = Field(..., pattern="^(ok|degraded|error)$")
    checks: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "degraded",
                "checks": {"database": "ok", "cache": "fallback"},
            }
        }
    )
