# app/core/pagination.py
"""
Page/page_size handling shared by every paginated list endpoint.

Out-of-range values are clamped rather than rejected: page < 1 becomes 1
and page_size is forced into [1, MAX_PAGE_SIZE].
"""
from fastapi import Query
from pydantic import BaseModel, computed_field

from app.core.config import settings


class PaginationParams(BaseModel):
    page: int = 1
    page_size: int = settings.DEFAULT_PAGE_SIZE

    @classmethod
    def clamped(cls, page: int = 1, page_size: int = settings.DEFAULT_PAGE_SIZE) -> "PaginationParams":
        return cls(
            page=max(page, 1),
            page_size=min(max(page_size, 1), settings.MAX_PAGE_SIZE),
        )

    @computed_field
    @property
    def offset(self) -> int:
        """Calculate offset for database query"""
        return (self.page - 1) * self.page_size


def pagination_params(
        page: int = Query(1, description="Page number (1-indexed)"),
        page_size: int = Query(settings.DEFAULT_PAGE_SIZE, description="Items per page"),
) -> PaginationParams:
    """FastAPI dependency"""
    return PaginationParams.clamped(page, page_size)
