"""Unit tests for the search stage."""

from __future__ import annotations

import pandas as pd
import pytest

from core.pipeline import apply_search
from tests.fixtures import ids, make_frame


class TestApplySearch:
    def test_empty_search_returns_input_unchanged(self, records: pd.DataFrame) -> None:
        result = apply_search(records, "")

        pd.testing.assert_frame_equal(result, records)

    @pytest.mark.parametrize("blank", ["   ", "\t", None])
    def test_blank_search_is_a_no_op(self, records: pd.DataFrame, blank) -> None:
        assert ids(apply_search(records, blank)) == ids(records)

    def test_matches_customer_name_case_insensitively(self, records: pd.DataFrame) -> None:
        assert ids(apply_search(records, "ALICE")) == ["C1"]
        assert ids(apply_search(records, "Jones")) == ["C2"]

    def test_matches_phone_number_substring(self, records: pd.DataFrame) -> None:
        assert ids(apply_search(records, "555")) == ["C2", "C3", "C5"]

    def test_search_is_trimmed(self, records: pd.DataFrame) -> None:
        assert ids(apply_search(records, "  diana ")) == ["C4"]

    def test_no_match_returns_empty_frame_with_same_columns(self, records: pd.DataFrame) -> None:
        result = apply_search(records, "zzz-no-such-customer")

        assert result.empty
        assert list(result.columns) == list(records.columns)

    def test_regex_characters_are_literal(self) -> None:
        frame = make_frame(
            [
                dict(customer_id="A", customer_name="A.B. Traders"),
                dict(customer_id="B", customer_name="AxB Traders"),
            ]
        )

        assert ids(apply_search(frame, "a.b")) == ["A"]

    def test_every_result_contains_the_search_text(self, records: pd.DataFrame) -> None:
        result = apply_search(records, "an")

        for _, row in result.iterrows():
            assert "an" in row["customer_name"].lower() or "an" in row["phone_number"].lower()
        assert set(result.index).issubset(set(records.index))

    def test_does_not_modify_input(self, records: pd.DataFrame) -> None:
        before = records.copy()

        apply_search(records, "alice")

        pd.testing.assert_frame_equal(records, before)
