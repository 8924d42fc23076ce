from __future__ import annotations

import pandas as pd
import pytest

from core.data import RecordStore
from tests.fixtures import make_frame


@pytest.fixture
def sample_records() -> pd.DataFrame:
    """Six sales rows covering absent ages, quantities and dates."""
    return make_frame(
        [
            dict(customer_id="C1", customer_name="Alice Smith", phone_number="9876543210", gender="Female", age=25,
                 customer_region="North", product_category="Electronics", tags="gadgets",
                 payment_method="Credit Card", quantity=3, date="2024-01-01 10:30:00"),
            dict(customer_id="C2", customer_name="bob jones", phone_number="5551234567", gender="Male", age=40,
                 customer_region="South", product_category="Clothing", tags="fashion",
                 payment_method="Cash", quantity=5, date="2024-01-02 08:00:00"),
            dict(customer_id="C3", customer_name="Charlie Brown", phone_number="5559876543", gender="Male", age=None,
                 customer_region="North", product_category="Electronics", tags="gadgets",
                 payment_method="UPI", quantity=None, date=None),
            dict(customer_id="C4", customer_name="Diana Prince", phone_number="1112223333", gender="Female", age=30,
                 customer_region="East", product_category="Beauty", tags="skincare",
                 payment_method="Credit Card", quantity=1, date="2024-01-01 23:59:59"),
            dict(customer_id="C5", customer_name="eve adams", phone_number="4445556666", gender="Female", age=35,
                 customer_region="North", product_category="Clothing", tags="fashion",
                 payment_method="Debit Card", quantity=5, date="2023-12-31 23:00:00"),
            dict(customer_id="C6", customer_name="Frank Castle", phone_number="", gender="Male", age=50,
                 customer_region="West", product_category="Electronics", tags="gadgets",
                 payment_method="Cash", quantity=2, date="2024-01-03"),
        ]
    )


@pytest.fixture
def store(sample_records: pd.DataFrame) -> RecordStore:
    return RecordStore(sample_records)


@pytest.fixture
def records(store: RecordStore) -> pd.DataFrame:
    return store.records()
