from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

from core.errors import QueryValidationError


DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_SORT = "date"
SORT_KEYS = ("date", "quantity", "customerName")


@dataclass(frozen=True)
class SalesQuery:
    search: str = ""
    regions: Tuple[str, ...] = ()
    genders: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    payment_methods: Tuple[str, ...] = ()
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: str = DEFAULT_SORT
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE


def _as_str_list(values: object) -> Tuple[str, ...]:
    """Accept a comma-separated string, or an iterable whose items may themselves be comma-separated."""
    if values is None:
        return ()
    if isinstance(values, str) or not isinstance(values, Iterable):
        values = [values]
    out = []
    for v in values:
        if v is None:
            continue
        for part in str(v).split(","):
            s = part.strip()
            if s:
                out.append(s)
    return tuple(out)


def _as_int(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        pass
    # "12.5" -> 12
    try:
        as_float = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if as_float != as_float or as_float in (float("inf"), float("-inf")):
        return None
    return int(as_float)


def _as_date(value: object) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def validate_query(query: SalesQuery) -> SalesQuery:
    if query.age_min is not None and query.age_max is not None and query.age_min > query.age_max:
        raise QueryValidationError("Invalid age range: ageMin cannot be greater than ageMax", field="ageMin")
    if query.date_from is not None and query.date_to is not None and query.date_from > query.date_to:
        raise QueryValidationError("Invalid date range: dateFrom cannot be after dateTo", field="dateFrom")
    return query


def normalize_query(raw: dict) -> SalesQuery:
    """Build a validated SalesQuery from loosely typed request values.

    Malformed page, page size and age values fall back per field (defaults or None);
    only contradictory bounds are rejected.
    """
    page = _as_int(raw.get("page"))
    page = DEFAULT_PAGE if page is None else max(1, page)

    page_size = _as_int(raw.get("page_size"))
    if page_size is None or page_size == 0:
        page_size = DEFAULT_PAGE_SIZE
    page_size = max(1, min(MAX_PAGE_SIZE, page_size))

    sort_by = raw.get("sort_by") or DEFAULT_SORT

    query = SalesQuery(
        search=str(raw.get("search") or "").strip(),
        regions=_as_str_list(raw.get("regions")),
        genders=_as_str_list(raw.get("genders")),
        categories=_as_str_list(raw.get("categories")),
        tags=_as_str_list(raw.get("tags")),
        payment_methods=_as_str_list(raw.get("payment_methods")),
        age_min=_as_int(raw.get("age_min")),
        age_max=_as_int(raw.get("age_max")),
        date_from=_as_date(raw.get("date_from")),
        date_to=_as_date(raw.get("date_to")),
        sort_by=str(sort_by).strip(),
        page=page,
        page_size=page_size,
    )
    return validate_query(query)
