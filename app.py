from contextlib import contextmanager
from datetime import date
from typing import Dict, Optional

import pandas as pd
import streamlit as st

from core.data import SALES_CSV_PATH, load_default_store
from core.errors import QueryValidationError, SourceUnavailableError
from core.facets import compute_filter_options
from core.filters import DEFAULT_PAGE_SIZE, SORT_KEYS, SalesQuery, normalize_query
from core.pipeline import run_query
from core.query_state import active_filter_count, params_from_query, query_from_params

SORT_LABELS = {
    "date": "Date (Newest First)",
    "quantity": "Quantity (High to Low)",
    "customerName": "Customer Name (A-Z)",
}
TABLE_COLUMNS = {
    "customer_name": "Customer",
    "phone_number": "Phone",
    "gender": "Gender",
    "age": "Age",
    "customer_region": "Region",
    "product_name": "Product",
    "brand": "Brand",
    "product_category": "Category",
    "quantity": "Quantity",
    "price_per_unit": "Price",
    "discount_percentage": "Discount",
    "final_amount": "Final Amount",
    "date": "Date",
    "payment_method": "Payment",
    "order_status": "Status",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #7c3aed;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(query: SalesQuery) -> str:
    chips = []
    if query.search:
        chips.append(f"Search: {query.search}")
    for label, values in [
        ("Region", query.regions),
        ("Gender", query.genders),
        ("Category", query.categories),
        ("Tag", query.tags),
        ("Payment", query.payment_methods),
    ]:
        if values:
            chips.append(f"{label}: {', '.join(values)}")
    if query.age_min is not None or query.age_max is not None:
        chips.append(f"Age: {query.age_min if query.age_min is not None else '…'}–{query.age_max if query.age_max is not None else '…'}")
    if query.date_from is not None or query.date_to is not None:
        chips.append(f"Date: {query.date_from or '…'} → {query.date_to or '…'}")
    if not chips:
        chips.append("Filters: All")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def format_table(records: pd.DataFrame) -> pd.DataFrame:
    table = records[list(TABLE_COLUMNS)].copy()
    table["price_per_unit"] = table["price_per_unit"].apply(lambda v: f"${float(v):,.2f}" if pd.notna(v) else "-")
    table["final_amount"] = table["final_amount"].apply(lambda v: f"${float(v):,.2f}" if pd.notna(v) else "-")
    table["discount_percentage"] = table["discount_percentage"].apply(lambda v: f"{float(v):.0f}%" if pd.notna(v) else "-")
    table["date"] = table["date"].dt.strftime("%Y-%m-%d").fillna("-")
    return table.rename(columns=TABLE_COLUMNS)


def sync_query_params(query: SalesQuery):
    params = params_from_query(query)
    if dict(st.query_params) != params:
        st.query_params.clear()
        st.query_params.update(params)


def _date_or_none(value) -> Optional[date]:
    return value if isinstance(value, date) else None


# ---------- UI setup ----------
st.set_page_config(page_title="Retail Sales Dashboard", layout="wide")
inject_base_styles()
st.title("Retail Sales Dashboard")
st.caption("Search, filter, sort and page through sales transactions.")

try:
    store = load_default_store()
except SourceUnavailableError as exc:
    st.error(f"{exc}. Set SALES_CSV_PATH or place the file at {SALES_CSV_PATH}.")
    st.stop()

options = compute_filter_options(store)
try:
    url_query = query_from_params(st.query_params)
except QueryValidationError:
    url_query = SalesQuery()

# ----- Sidebar: filter panel -----
with st.sidebar:
    st.markdown("### Filters")
    if st.button("Clear all", disabled=active_filter_count(url_query) == 0):
        st.query_params.clear()
        st.rerun()

    regions = st.multiselect("Customer Region", options=options["regions"], default=[v for v in url_query.regions if v in options["regions"]])
    genders = st.multiselect("Gender", options=options["genders"], default=[v for v in url_query.genders if v in options["genders"]])

    age_range = options["age_range"]
    age_cols = st.columns(2)
    age_min = age_cols[0].number_input("Age min", min_value=0, value=url_query.age_min, placeholder=str(age_range["min"]), step=1)
    age_max = age_cols[1].number_input("Age max", min_value=0, value=url_query.age_max, placeholder=str(age_range["max"]), step=1)

    categories = st.multiselect("Product Category", options=options["categories"], default=[v for v in url_query.categories if v in options["categories"]])
    tags = st.multiselect("Tags", options=options["tags"], default=[v for v in url_query.tags if v in options["tags"]])
    payment_methods = st.multiselect(
        "Payment Method",
        options=options["payment_methods"],
        default=[v for v in url_query.payment_methods if v in options["payment_methods"]],
    )

    date_range = options["date_range"]
    date_cols = st.columns(2)
    date_from = date_cols[0].date_input(
        "From",
        value=url_query.date_from,
        min_value=date.fromisoformat(date_range["min"]) if date_range["min"] else None,
        max_value=date.fromisoformat(date_range["max"]) if date_range["max"] else None,
    )
    date_to = date_cols[1].date_input(
        "To",
        value=url_query.date_to,
        min_value=date.fromisoformat(date_range["min"]) if date_range["min"] else None,
        max_value=date.fromisoformat(date_range["max"]) if date_range["max"] else None,
    )

top = st.columns([6, 2, 2])
search = top[0].text_input("Search by customer name or phone number", value=url_query.search)
sort_by = top[1].selectbox(
    "Sort by",
    options=list(SORT_KEYS),
    index=list(SORT_KEYS).index(url_query.sort_by) if url_query.sort_by in SORT_KEYS else 0,
    format_func=lambda k: SORT_LABELS.get(k, k),
)
page_size = top[2].selectbox("Rows per page", options=[10, 25, 50, 100], index=[10, 25, 50, 100].index(url_query.page_size) if url_query.page_size in (10, 25, 50, 100) else 0)

raw: Dict[str, object] = {
    "search": search,
    "regions": regions,
    "genders": genders,
    "age_min": None if age_min is None else int(age_min),
    "age_max": None if age_max is None else int(age_max),
    "categories": categories,
    "tags": tags,
    "payment_methods": payment_methods,
    "date_from": _date_or_none(date_from),
    "date_to": _date_or_none(date_to),
    "sort_by": sort_by,
    "page_size": page_size or DEFAULT_PAGE_SIZE,
}
# Any filter change sends the user back to the first page.
signature = repr(sorted(raw.items()))
previous = st.session_state.get("_filter_signature")
st.session_state["_filter_signature"] = signature
raw["page"] = 1 if previous is not None and previous != signature else url_query.page

try:
    result = run_query(store, raw)
except QueryValidationError as exc:
    st.error(exc.message)
    st.stop()

meta = result.metadata
current = normalize_query({**raw, "page": meta.page, "page_size": meta.page_size})
sync_query_params(current)

with card("Sales Transactions", actions=f"{meta.total:,} records"):
    st.markdown(f"<div class='chip-row'>{format_filter_summary(current)}</div>", unsafe_allow_html=True)
    if result.records.empty:
        st.info("No sales records match the current search and filters.")
    else:
        st.dataframe(format_table(result.records), hide_index=True, use_container_width=True)

nav = st.columns([1, 3, 1])
if nav[0].button("← Previous", disabled=meta.page <= 1):
    st.query_params["page"] = str(meta.page - 1)
    st.rerun()
nav[1].markdown(
    f"<div style='text-align:center;'>Page {meta.page} of {meta.total_pages} "
    f"({(meta.page - 1) * meta.page_size + (1 if meta.total else 0)}–{min(meta.page * meta.page_size, meta.total)} of {meta.total:,})</div>",
    unsafe_allow_html=True,
)
if nav[2].button("Next →", disabled=meta.page >= meta.total_pages):
    st.query_params["page"] = str(meta.page + 1)
    st.rerun()
