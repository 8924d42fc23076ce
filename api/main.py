from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
import logging
import math
import os
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from pydantic.alias_generators import to_camel

from api.schemas import (
    ErrorResponse,
    FilterOptionsResponse,
    HealthResponse,
    PageMetadataModel,
    SalesPageResponse,
)
from core.data import SALES_CSV_PATH, RecordStore, load_sales_csv
from core.errors import QueryValidationError, StoreNotReadyError
from core.facets import compute_filter_options
from core.pipeline import run_query


logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
if os.environ.get("CORS_ORIGIN"):
    CORS_ORIGINS.append(os.environ["CORS_ORIGIN"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid query"},
    500: {"model": ErrorResponse, "description": "Unexpected failure"},
    503: {"model": ErrorResponse, "description": "Sales data not loaded"},
}


def _documented(model: type) -> dict:
    return {200: {"model": model}, **ERROR_RESPONSES}


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    body = {"error": str(exc), "type": type(exc).__name__}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    return JSONResponse(status_code=status_code, content=body)


def records_payload(records: pd.DataFrame) -> list:
    return records.rename(columns=to_camel).to_dict(orient="records")


def create_app(store: Optional[RecordStore] = None, csv_path: Optional[Path] = None) -> FastAPI:
    store = store if store is not None else RecordStore()
    source = Path(csv_path or SALES_CSV_PATH)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not store.ready:
            logger.info("Loading sales data from %s", source)
            # SourceUnavailableError propagates and aborts startup.
            store.load(load_sales_csv(source))
        yield

    app = FastAPI(title="Retail Sales Dashboard API", version="0.1.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(QueryValidationError)
    async def _validation_failed(request: Request, exc: QueryValidationError):
        logger.warning("Rejected query %s: %s", request.url.query, exc)
        return _error(exc, 400)

    @app.exception_handler(StoreNotReadyError)
    async def _not_ready(request: Request, exc: StoreNotReadyError):
        logger.warning("Query before sales data finished loading: %s", request.url.path)
        return _error(exc, 503)

    @app.get("/health", responses={200: {"model": HealthResponse}})
    def health():
        return _json({"status": "ok", "ready": store.ready, "records": len(store)})

    @app.get("/api/sales", responses=_documented(SalesPageResponse))
    def list_sales(
        search: str = Query(default=""),
        regions: Optional[List[str]] = Query(default=None),
        genders: Optional[List[str]] = Query(default=None),
        age_min: Optional[str] = Query(default=None, alias="ageMin"),
        age_max: Optional[str] = Query(default=None, alias="ageMax"),
        categories: Optional[List[str]] = Query(default=None),
        tags: Optional[List[str]] = Query(default=None),
        payment_methods: Optional[List[str]] = Query(default=None, alias="paymentMethods"),
        date_from: Optional[str] = Query(default=None, alias="dateFrom"),
        date_to: Optional[str] = Query(default=None, alias="dateTo"),
        sort_by: str = Query(default="date", alias="sortBy"),
        page: Optional[str] = Query(default=None),
        page_size: Optional[str] = Query(default=None, alias="pageSize"),
    ):
        raw = {
            "search": search,
            "regions": regions,
            "genders": genders,
            "age_min": age_min,
            "age_max": age_max,
            "categories": categories,
            "tags": tags,
            "payment_methods": payment_methods,
            "date_from": date_from,
            "date_to": date_to,
            "sort_by": sort_by,
            "page": page,
            "page_size": page_size,
        }
        try:
            result = run_query(store, raw)
        except (QueryValidationError, StoreNotReadyError):
            raise
        except Exception as exc:
            logger.exception("list_sales failed")
            return _error(exc, 500)
        metadata = PageMetadataModel(**asdict(result.metadata)).model_dump(by_alias=True)
        return _json({"records": records_payload(result.records), "metadata": metadata})

    @app.get("/api/sales/filter-options", responses=_documented(FilterOptionsResponse))
    def filter_options():
        try:
            payload = compute_filter_options(store)
        except StoreNotReadyError:
            raise
        except Exception as exc:
            logger.exception("filter_options failed")
            return _error(exc, 500)
        return _json(FilterOptionsResponse(**payload).model_dump(by_alias=True))

    return app


app = create_app()
