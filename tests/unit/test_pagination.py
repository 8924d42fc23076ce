"""Unit tests for the pagination stage."""

from __future__ import annotations

import pandas as pd
import pytest

from core.data import conform_records, empty_records
from core.pipeline import PageMetadata, apply_pagination
from tests.fixtures import ids, make_frame


@pytest.fixture
def twenty_five() -> pd.DataFrame:
    return conform_records(make_frame([dict(customer_id=f"R{i:02d}") for i in range(25)]))


class TestApplyPagination:
    def test_first_page(self, twenty_five: pd.DataFrame) -> None:
        page, meta = apply_pagination(twenty_five, 1, 10)

        assert ids(page) == [f"R{i:02d}" for i in range(10)]
        assert meta == PageMetadata(total=25, page=1, page_size=10, total_pages=3)

    def test_last_partial_page(self, twenty_five: pd.DataFrame) -> None:
        page, meta = apply_pagination(twenty_five, 3, 10)

        assert ids(page) == [f"R{i:02d}" for i in range(20, 25)]
        assert meta.page == 3

    def test_page_below_one_clamps_to_first(self, twenty_five: pd.DataFrame) -> None:
        _, meta = apply_pagination(twenty_five, 0, 10)
        _, negative = apply_pagination(twenty_five, -7, 10)

        assert meta.page == 1
        assert negative.page == 1

    def test_page_past_the_end_clamps_to_last(self, twenty_five: pd.DataFrame) -> None:
        page, meta = apply_pagination(twenty_five, 10_000, 10)

        assert meta.page == meta.total_pages == 3
        assert len(page) == 5

    def test_empty_collection_has_one_page(self) -> None:
        page, meta = apply_pagination(empty_records(), 4, 10)

        assert page.empty
        assert meta == PageMetadata(total=0, page=1, page_size=10, total_pages=1)

    @pytest.mark.parametrize("size, expected", [(0, 1), (-5, 1), (1000, 100), (7, 7)])
    def test_page_size_is_clamped(self, twenty_five: pd.DataFrame, size: int, expected: int) -> None:
        _, meta = apply_pagination(twenty_five, 1, size)

        assert meta.page_size == expected

    def test_total_always_matches_input_length(self, twenty_five: pd.DataFrame) -> None:
        for size in (1, 3, 10, 25, 100):
            _, meta = apply_pagination(twenty_five, 2, size)
            assert meta.total == 25
