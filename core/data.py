from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.errors import SourceUnavailableError, StoreAlreadyLoadedError, StoreNotReadyError


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]


def default_csv_path() -> Path:
    """SALES_CSV_PATH, then CSV_FILE_PATH, then data/sales_data.csv under the project root."""
    configured = os.environ.get("SALES_CSV_PATH") or os.environ.get("CSV_FILE_PATH")
    return Path(configured) if configured else DATA_DIR / "data" / "sales_data.csv"


SALES_CSV_PATH = default_csv_path()

SALES_COLUMNS = {
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Age": "age",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Tags": "tags",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Date": "date",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}
RECORD_COLUMNS = list(SALES_COLUMNS.values())

INT_COLUMNS = ["age", "quantity"]
FLOAT_COLUMNS = ["price_per_unit", "discount_percentage", "total_amount", "final_amount"]
DATE_COLUMNS = ["date"]
STRING_COLUMNS = [c for c in RECORD_COLUMNS if c not in INT_COLUMNS + FLOAT_COLUMNS + DATE_COLUMNS]


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


def coerce_str_safe(df: pd.DataFrame, cols: List[str]) -> pd.DataFrame:
    for col in cols:
        series = df[col].astype("string").str.strip()
        df[col] = series.fillna("").astype(object)
    return df


def numericize(df: pd.DataFrame, cols: List[str]) -> pd.DataFrame:
    for col in cols:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")
    return df


def integerize(df: pd.DataFrame, cols: List[str]) -> pd.DataFrame:
    """Whole numbers become Int64; anything else (text, 12.5, inf) becomes <NA>."""
    for col in cols:
        values = pd.to_numeric(df[col], errors="coerce").astype("float64")
        values = values.where(values.notna() & (values % 1 == 0))
        df[col] = values.astype("Int64")
    return df


def datetimeize(df: pd.DataFrame, cols: List[str]) -> pd.DataFrame:
    for col in cols:
        raw = df[col]
        if not pd.api.types.is_datetime64_any_dtype(raw):
            raw = raw.astype("string").str.strip().replace({"": pd.NA})
            raw = pd.to_datetime(raw, errors="coerce", format="mixed")
        if getattr(raw.dt, "tz", None) is not None:
            raw = raw.dt.tz_localize(None)
        df[col] = raw.astype("datetime64[ns]")
    return df


def conform_records(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce a snake_case frame into the sales record layout and dtypes.

    Missing columns are added as absent; columns outside the record layout are dropped.
    Strings are never absent (empty string), numbers and dates are absent on failure.
    """
    out = df.copy()
    for col in RECORD_COLUMNS:
        if col not in out.columns:
            out[col] = None
    out = out[RECORD_COLUMNS].reset_index(drop=True)
    out = coerce_str_safe(out, STRING_COLUMNS)
    out = integerize(out, INT_COLUMNS)
    out = numericize(out, FLOAT_COLUMNS)
    out = datetimeize(out, DATE_COLUMNS)
    return out


def empty_records() -> pd.DataFrame:
    return conform_records(pd.DataFrame(columns=RECORD_COLUMNS))


# ---------------- Loaders ----------------
def load_sales_csv(path: Path) -> pd.DataFrame:
    path = Path(path)
    if not path.is_file():
        raise SourceUnavailableError(f"CSV file not found at {path}")

    skipped: List[List[str]] = []

    def _skip_bad_line(fields: List[str]) -> None:
        skipped.append(fields)
        logger.warning("Skipping malformed row with %d fields: %s", len(fields), fields[:3])
        return None

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            encoding="utf-8",
            encoding_errors="replace",
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
            on_bad_lines=_skip_bad_line,
        )
    except pd.errors.EmptyDataError:
        logger.warning("Sales file %s is empty", path)
        return empty_records()
    except (OSError, pd.errors.ParserError) as exc:
        raise SourceUnavailableError(f"Cannot read sales file {path}: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    df = df.rename(columns=SALES_COLUMNS)
    df = df.loc[:, ~df.columns.duplicated()]
    records = conform_records(df)
    if skipped:
        logger.warning("Skipped %d malformed rows in %s", len(skipped), path)
    logger.info("Loaded %d sales records from %s", len(records), path)
    return records


class RecordStore:
    """In-memory sales records, loaded once and read-only afterwards."""

    def __init__(self, records: Optional[pd.DataFrame] = None) -> None:
        self._records: Optional[pd.DataFrame] = None
        if records is not None:
            self.load(records)

    @property
    def ready(self) -> bool:
        return self._records is not None

    def __len__(self) -> int:
        return 0 if self._records is None else len(self._records)

    def load(self, records: pd.DataFrame) -> "RecordStore":
        if self._records is not None:
            raise StoreAlreadyLoadedError("Sales data is already loaded")
        self._records = conform_records(records)
        return self

    def _require_ready(self) -> pd.DataFrame:
        if self._records is None:
            raise StoreNotReadyError()
        return self._records

    def _column(self, field: str) -> pd.Series:
        df = self._require_ready()
        if field not in df.columns:
            raise KeyError(f"Unknown sales record field: {field}")
        return df[field]

    def records(self) -> pd.DataFrame:
        return self._require_ready().copy()

    def distinct_values(self, field: str) -> List[str]:
        values = self._column(field).dropna().astype(str)
        return sorted(set(v for v in values if v != ""))

    def numeric_range(self, field: str) -> Dict[str, float]:
        col = self._column(field)
        values = pd.to_numeric(col, errors="coerce").astype("float64").dropna()
        if values.empty:
            return {"min": 0, "max": 0}
        if pd.api.types.is_integer_dtype(col):
            return {"min": int(values.min()), "max": int(values.max())}
        return {"min": float(values.min()), "max": float(values.max())}

    def date_range(self, field: str = "date") -> Dict[str, Optional[pd.Timestamp]]:
        dates = self._column(field).dropna()
        if dates.empty:
            return {"min": None, "max": None}
        return {"min": dates.min(), "max": dates.max()}


def load_record_store(path: Optional[Path] = None) -> RecordStore:
    return RecordStore(load_sales_csv(Path(path or SALES_CSV_PATH)))


@lru_cache(maxsize=4)
def _load_record_store_cached(files_sig: Tuple[str, float]) -> RecordStore:
    return load_record_store(Path(files_sig[0]))


def load_default_store(path: Optional[Path] = None) -> RecordStore:
    path = Path(path or SALES_CSV_PATH)
    if not path.is_file():
        raise SourceUnavailableError(f"CSV file not found at {path}")
    return _load_record_store_cached(file_signature(path))
