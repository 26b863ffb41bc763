"""
Fund data pipeline.

Fetch fund lists from the REST endpoint, validate the payload shape and
normalize drifting field names into canonical ``Fund`` records.
"""

from __future__ import annotations

from .errors import FetchError, FundPipelineError, SchemaValidationError
from .fetcher import FundsFetcher, build_query_params, classify_fetch_error
from .normalize import (
    FIELD_SOURCES,
    category_display_name,
    format_category,
    funds_to_frame,
    normalize_category,
    normalize_fund,
    normalize_funds,
    normalize_sub_category,
    resolve_field,
)
from .schemas import validate_fund_detail_response, validate_fund_frame, validate_funds_response
from .types import FetchResult, Fund, FundPage, FundQueryOptions, Pagination

__all__ = [
    "FIELD_SOURCES",
    "FetchError",
    "FetchResult",
    "Fund",
    "FundPage",
    "FundPipelineError",
    "FundQueryOptions",
    "FundsFetcher",
    "Pagination",
    "SchemaValidationError",
    "build_query_params",
    "category_display_name",
    "classify_fetch_error",
    "format_category",
    "funds_to_frame",
    "normalize_category",
    "normalize_fund",
    "normalize_funds",
    "normalize_sub_category",
    "resolve_field",
    "validate_fund_detail_response",
    "validate_fund_frame",
    "validate_funds_response",
]
