"""Parse-and-validate boundary for fund API payloads and normalized frames."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
import pandera as pa
from pandera import Check, Column

from fundscope.data_pipeline.errors import SchemaValidationError
from fundscope.data_pipeline.types import Pagination

NUMERIC_FUND_COLUMNS = [
    "nav",
    "returns_1y",
    "returns_3y",
    "returns_5y",
    "aum",
    "expense_ratio",
    "rating",
]

REQUIRED_FUND_COLUMNS = ["id", "name", "fund_house", "category", "sub_category", *NUMERIC_FUND_COLUMNS]


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_pagination(raw: Any) -> Pagination | None:
    """Parse the optional ``pagination`` block; both ``hasNext`` and ``hasMore`` spellings are accepted."""
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise SchemaValidationError("pagination must be an object")

    page = max(1, _as_int(raw.get("page"), 1))
    limit = max(0, _as_int(raw.get("limit"), 0))
    total = max(0, _as_int(raw.get("total"), 0))
    total_pages = max(0, _as_int(raw.get("totalPages"), 0))
    if not total_pages and limit:
        total_pages = -(-total // limit)

    has_next = raw.get("hasNext")
    if has_next is None:
        has_next = raw.get("hasMore")
    if has_next is None:
        has_next = page < total_pages
    has_prev = raw.get("hasPrev")
    if has_prev is None:
        has_prev = page > 1

    return Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=bool(has_next),
        has_prev=bool(has_prev),
    )


def validate_funds_response(payload: Any) -> tuple[list[dict[str, Any]], Pagination | None, str | None]:
    """Validate a ``GET /funds`` envelope and return ``(items, pagination, message)``."""
    if not isinstance(payload, dict):
        raise SchemaValidationError(
            f"funds response must be an object, got {type(payload).__name__}"
        )

    items = payload.get("data")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise SchemaValidationError("funds response 'data' must be a list")

    bad = [idx for idx, item in enumerate(items) if not isinstance(item, dict)]
    if bad:
        raise SchemaValidationError(f"funds response items must be objects; invalid positions: {bad[:10]}")

    message = payload.get("message")
    return items, parse_pagination(payload.get("pagination")), str(message) if message else None


def validate_fund_detail_response(payload: Any) -> dict[str, Any]:
    """Validate a ``GET /funds/{id}`` envelope and return the fund object."""
    if not isinstance(payload, dict):
        raise SchemaValidationError(
            f"fund detail response must be an object, got {type(payload).__name__}"
        )
    item = payload.get("data")
    if not isinstance(item, dict):
        raise SchemaValidationError("fund detail response 'data' must be an object")
    return item


def validate_fund_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Validate the tabular view of normalized funds."""
    if frame is None:
        raise SchemaValidationError("fund frame is None")
    if frame.empty:
        return frame

    missing = [col for col in REQUIRED_FUND_COLUMNS if col not in frame.columns]
    if missing:
        raise SchemaValidationError(f"fund frame: missing required columns: {missing}")

    schema = pa.DataFrameSchema(
        {
            "id": Column(str, nullable=False),
            "name": Column(str, nullable=False),
            "fund_house": Column(object, nullable=True),
            "category": Column(str, nullable=False),
            "sub_category": Column(object, nullable=True),
            **{
                col: Column(float, nullable=False, checks=Check(lambda s: np.isfinite(s)))
                for col in NUMERIC_FUND_COLUMNS
                if col != "rating"
            },
            "rating": Column(float, nullable=False, checks=Check.in_range(0.0, 5.0)),
        },
        strict=False,
        coerce=True,
    )
    try:
        return schema.validate(frame, lazy=True)
    except (pa.errors.SchemaError, pa.errors.SchemaErrors) as exc:
        raise SchemaValidationError(f"fund frame schema validation failed: {exc}") from exc
