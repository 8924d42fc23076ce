from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageMetadataModel(CamelModel):
    total: int
    page: int
    page_size: int
    total_pages: int


class SalesRecordModel(CamelModel):
    customer_id: str = ""
    customer_name: str = ""
    phone_number: str = ""
    gender: str = ""
    age: Optional[int] = None
    customer_region: str = ""
    customer_type: str = ""
    product_id: str = ""
    product_name: str = ""
    brand: str = ""
    product_category: str = ""
    tags: str = ""
    quantity: Optional[int] = None
    price_per_unit: Optional[float] = None
    discount_percentage: Optional[float] = None
    total_amount: Optional[float] = None
    final_amount: Optional[float] = None
    date: Optional[datetime] = None
    payment_method: str = ""
    order_status: str = ""
    delivery_type: str = ""
    store_id: str = ""
    store_location: str = ""
    salesperson_id: str = ""
    employee_name: str = ""


class SalesPageResponse(BaseModel):
    records: List[SalesRecordModel] = Field(default_factory=list)
    metadata: PageMetadataModel


class NumericRangeModel(BaseModel):
    min: Union[int, float] = 0
    max: Union[int, float] = 0


class DateRangeModel(BaseModel):
    min: Optional[str] = None
    max: Optional[str] = None


class FilterOptionsResponse(CamelModel):
    regions: List[str] = Field(default_factory=list)
    genders: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    payment_methods: List[str] = Field(default_factory=list)
    age_range: NumericRangeModel = Field(default_factory=NumericRangeModel)
    date_range: DateRangeModel = Field(default_factory=DateRangeModel)


class ErrorResponse(BaseModel):
    error: str
    type: str
    field: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    ready: bool
    records: int
