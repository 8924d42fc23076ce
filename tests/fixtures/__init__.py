"""Shared record builders for the test suite."""

from __future__ import annotations

from typing import Dict, List

import pandas as pd


def make_record(**overrides) -> Dict[str, object]:
    record: Dict[str, object] = {
        "customer_id": "CUST-0",
        "customer_name": "",
        "phone_number": "",
        "gender": "",
        "age": None,
        "customer_region": "",
        "customer_type": "Regular",
        "product_id": "PROD-0",
        "product_name": "Widget",
        "brand": "Acme",
        "product_category": "",
        "tags": "",
        "quantity": None,
        "price_per_unit": 10.0,
        "discount_percentage": 0.0,
        "total_amount": 10.0,
        "final_amount": 10.0,
        "date": None,
        "payment_method": "",
        "order_status": "Completed",
        "delivery_type": "Standard",
        "store_id": "ST-1",
        "store_location": "Mumbai",
        "salesperson_id": "SP-1",
        "employee_name": "Ravi",
    }
    record.update(overrides)
    return record


def make_frame(rows: List[Dict[str, object]]) -> pd.DataFrame:
    return pd.DataFrame([make_record(**row) for row in rows])


def ids(frame: pd.DataFrame) -> List[str]:
    return frame["customer_id"].tolist()
