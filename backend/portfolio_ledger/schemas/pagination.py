# backend/portfolio_ledger/schemas/pagination.py
"""
Pagination schemas for list endpoints.

List routes take 1-indexed ``page`` and ``page_size`` query parameters;
services work with offset/limit. PaginationMeta converts between the two
and exposes computed navigation fields.

Usage:
    skip = page_offset(page, page_size)
    items, total = service.list_assets(db, skip, page_size)
    PaginatedData(items=items, pagination=PaginationMeta.create(total, page, page_size))
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


def page_offset(page: int, page_size: int) -> int:
    """Offset of the first row of a 1-indexed page."""
    return (page - 1) * page_size


class PaginationMeta(BaseModel):
    """
    Attributes:
        total: Total number of items matching the query
        page: Current page (1-indexed)
        page_size: Maximum items per page
        pages: Total number of pages (computed)
        has_next / has_previous: Navigation hints (computed)
    """

    total: int = Field(..., ge=0, description="Total number of items matching query")
    page: int = Field(..., ge=1, description="Current page number (1-indexed)")
    page_size: int = Field(..., ge=1, description="Maximum items per page")

    @computed_field
    @property
    def pages(self) -> int:
        if self.total <= 0:
            return 1
        return (self.total + self.page_size - 1) // self.page_size  # Ceiling division

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @classmethod
    def create(cls, total: int, page: int, page_size: int) -> "PaginationMeta":
        return cls(total=total, page=page, page_size=page_size)


class PaginatedData(BaseModel, Generic[T]):
    items: list[T] = Field(..., description="Items on the current page")
    pagination: PaginationMeta
