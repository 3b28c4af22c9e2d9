# tests/schemas/test_pagination.py
"""
Tests for the pagination schema implementation.
"""

import pytest
from pydantic import ValidationError

from portfolio_ledger.schemas.pagination import PaginationMeta, PaginatedData, page_offset


class TestPageOffset:

    @pytest.mark.parametrize(
        "page,page_size,expected",
        [(1, 10, 0), (2, 10, 10), (6, 10, 50), (3, 25, 50)],
    )
    def test_offset(self, page, page_size, expected):
        assert page_offset(page, page_size) == expected


class TestPaginationMeta:
    """Tests for PaginationMeta class."""

    def test_create_basic(self):
        meta = PaginationMeta.create(total=100, page=1, page_size=10)

        assert meta.total == 100
        assert meta.page == 1
        assert meta.page_size == 10

    def test_pages_calculation_exact(self):
        """Should calculate pages when total is divisible by page_size."""
        assert PaginationMeta.create(total=100, page=1, page_size=10).pages == 10

    def test_pages_calculation_with_remainder(self):
        """Should round up pages when total has remainder."""
        assert PaginationMeta.create(total=105, page=1, page_size=10).pages == 11

    def test_pages_for_empty_result(self):
        """An empty result still reports one page."""
        meta = PaginationMeta.create(total=0, page=1, page_size=10)

        assert meta.pages == 1
        assert meta.has_next is False
        assert meta.has_previous is False

    def test_navigation_middle_page(self):
        meta = PaginationMeta.create(total=100, page=5, page_size=10)

        assert meta.has_next is True
        assert meta.has_previous is True

    def test_navigation_last_page(self):
        meta = PaginationMeta.create(total=100, page=10, page_size=10)

        assert meta.has_next is False
        assert meta.has_previous is True

    def test_computed_fields_serialized(self):
        data = PaginationMeta.create(total=21, page=2, page_size=10).model_dump()

        assert data == {
            "total": 21,
            "page": 2,
            "page_size": 10,
            "pages": 3,
            "has_next": True,
            "has_previous": True,
        }

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"total": -1, "page": 1, "page_size": 10},
            {"total": 10, "page": 0, "page_size": 10},
            {"total": 10, "page": 1, "page_size": 0},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            PaginationMeta(**kwargs)


class TestPaginatedData:

    def test_generic_items(self):
        page = PaginatedData[int](
            items=[1, 2, 3],
            pagination=PaginationMeta.create(total=3, page=1, page_size=10),
        )

        assert page.items == [1, 2, 3]
        assert page.pagination.pages == 1
