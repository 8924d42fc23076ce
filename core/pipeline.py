"""Query pipeline: search -> filter -> sort -> paginate.

Every stage takes a records DataFrame and returns a new one; inputs are never modified.
"""

from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Tuple

import pandas as pd

from core.data import RecordStore
from core.filters import MAX_PAGE_SIZE, SalesQuery, normalize_query, validate_query


SEARCH_COLUMNS = ("customer_name", "phone_number")


@dataclass(frozen=True)
class PageMetadata:
    total: int
    page: int
    page_size: int
    total_pages: int


@dataclass(frozen=True)
class QueryResult:
    records: pd.DataFrame
    metadata: PageMetadata


def apply_search(records: pd.DataFrame, search: str) -> pd.DataFrame:
    query = (search or "").strip().lower()
    if not query:
        return records
    mask = pd.Series(False, index=records.index)
    for col in SEARCH_COLUMNS:
        text = records[col].fillna("").astype(str).str.lower()
        mask |= text.str.contains(query, regex=False)
    return records[mask]


def _present(mask: pd.Series) -> pd.Series:
    # comparisons against <NA> yield <NA>; absent values never match a bound
    return mask.fillna(False).astype(bool)


def _isin(records: pd.DataFrame, col: str, values: Iterable[str]) -> pd.Series:
    return records[col].isin(set(values))


def apply_filters(records: pd.DataFrame, query: SalesQuery) -> pd.DataFrame:
    """AND across categories, OR within a category; empty selections impose nothing."""
    mask = pd.Series(True, index=records.index)

    if query.regions:
        mask &= _isin(records, "customer_region", query.regions)
    if query.genders:
        mask &= _isin(records, "gender", query.genders)

    if query.age_min is not None:
        mask &= _present(records["age"] >= query.age_min)
    if query.age_max is not None:
        mask &= _present(records["age"] <= query.age_max)

    if query.categories:
        mask &= _isin(records, "product_category", query.categories)
    if query.tags:
        mask &= _isin(records, "tags", query.tags)
    if query.payment_methods:
        mask &= _isin(records, "payment_method", query.payment_methods)

    if query.date_from is not None:
        start = pd.Timestamp(query.date_from)
        mask &= _present(records["date"] >= start)
    if query.date_to is not None:
        end_of_day = pd.Timestamp(query.date_to) + pd.Timedelta(days=1) - pd.Timedelta(milliseconds=1)
        mask &= _present(records["date"] <= end_of_day)

    return records[mask]


def _fold(name: str) -> str:
    """Accent- and case-insensitive form, with the lowercased name as tie-breaker."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return f"{base}\x00{name.lower()}"


def _name_key(names: pd.Series) -> pd.Series:
    return names.fillna("").astype(str).map(_fold)


def apply_sorting(records: pd.DataFrame, sort_by: str) -> pd.DataFrame:
    if sort_by == "date":
        return records.sort_values("date", ascending=False, kind="stable", na_position="last")
    if sort_by == "quantity":
        return records.sort_values(
            "quantity",
            ascending=False,
            kind="stable",
            key=lambda s: s.fillna(0).astype("int64"),
        )
    if sort_by == "customerName":
        return records.sort_values("customer_name", ascending=True, kind="stable", key=_name_key)
    return records


def apply_pagination(records: pd.DataFrame, page: int, page_size: int) -> Tuple[pd.DataFrame, PageMetadata]:
    page_size = max(1, min(MAX_PAGE_SIZE, int(page_size)))
    total = int(len(records))
    total_pages = max(1, math.ceil(total / page_size))
    current = max(1, min(int(page), total_pages))
    start = (current - 1) * page_size
    window = records.iloc[start : start + page_size]
    return window, PageMetadata(total=total, page=current, page_size=page_size, total_pages=total_pages)


def run_query(store: RecordStore, query: dict | SalesQuery) -> QueryResult:
    q = validate_query(query) if isinstance(query, SalesQuery) else normalize_query(query)
    records = store.records()
    records = apply_search(records, q.search)
    records = apply_filters(records, q)
    records = apply_sorting(records, q.sort_by)
    page, metadata = apply_pagination(records, q.page, q.page_size)
    return QueryResult(records=page.reset_index(drop=True), metadata=metadata)
