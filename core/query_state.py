"""Translate between a SalesQuery and flat URL-style parameters.

Transport names follow the public API (``ageMin``, ``paymentMethods``...); multi-value
filters are comma-joined and ISO dates are used for the date bounds.
"""

from __future__ import annotations

from typing import Dict, Mapping

from core.filters import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, DEFAULT_SORT, SalesQuery, normalize_query


PARAM_NAMES = {
    "search": "search",
    "regions": "regions",
    "genders": "genders",
    "age_min": "ageMin",
    "age_max": "ageMax",
    "categories": "categories",
    "tags": "tags",
    "payment_methods": "paymentMethods",
    "date_from": "dateFrom",
    "date_to": "dateTo",
    "sort_by": "sortBy",
    "page": "page",
    "page_size": "pageSize",
}


def query_from_params(params: Mapping[str, object]) -> SalesQuery:
    raw = {field: params.get(name) for field, name in PARAM_NAMES.items()}
    return normalize_query(raw)


def params_from_query(query: SalesQuery) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if query.search:
        params["search"] = query.search
    for field in ("regions", "genders", "categories", "tags", "payment_methods"):
        values = getattr(query, field)
        if values:
            params[PARAM_NAMES[field]] = ",".join(values)
    for field in ("age_min", "age_max"):
        value = getattr(query, field)
        if value is not None:
            params[PARAM_NAMES[field]] = str(value)
    for field in ("date_from", "date_to"):
        value = getattr(query, field)
        if value is not None:
            params[PARAM_NAMES[field]] = value.isoformat()
    if query.sort_by and query.sort_by != DEFAULT_SORT:
        params["sortBy"] = query.sort_by
    if query.page != DEFAULT_PAGE:
        params["page"] = str(query.page)
    if query.page_size != DEFAULT_PAGE_SIZE:
        params["pageSize"] = str(query.page_size)
    return params


def active_filter_count(query: SalesQuery) -> int:
    count = sum(len(v) for v in (query.regions, query.genders, query.categories, query.tags, query.payment_methods))
    if query.age_min is not None or query.age_max is not None:
        count += 1
    if query.date_from is not None or query.date_to is not None:
        count += 1
    return count
