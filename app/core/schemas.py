"""Core schema definitions for standardized API responses.

Error bodies produced by ``app.core.exceptions`` follow ``ErrorResponse``;
list endpoints return ``PaginatedResponse``.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, le=100, description="Items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")

    @classmethod
    def from_query(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(total=total, page=page, limit=limit, pages=pages)


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list response with metadata."""

    success: bool = True
    data: list[T]
    meta: PaginationMeta


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(None, description="Additional error context")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    error: ErrorDetail


def paginated_response(
    data: list[T],
    total: int,
    page: int,
    limit: int,
) -> PaginatedResponse[T]:
    """Create a paginated response.

    Args:
        data: List of items for current page.
        total: Total number of items.
        page: Current page number (1-indexed).
        limit: Items per page.
    """
    return PaginatedResponse(
        data=data,
        meta=PaginationMeta.from_query(total, page, limit),
    )
