from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

from core.data import RecordStore


FACET_FIELDS = {
    "regions": "customer_region",
    "genders": "gender",
    "categories": "product_category",
    "tags": "tags",
    "payment_methods": "payment_method",
}


def _iso_day(value: Optional[pd.Timestamp]) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    return value.strftime("%Y-%m-%d")


def compute_filter_options(store: RecordStore) -> Dict[str, Any]:
    """Distinct values and ranges used to populate the filter controls."""
    payload: Dict[str, Any] = {name: store.distinct_values(field) for name, field in FACET_FIELDS.items()}
    payload["age_range"] = store.numeric_range("age")
    dates = store.date_range()
    payload["date_range"] = {"min": _iso_day(dates["min"]), "max": _iso_day(dates["max"])}
    return payload
