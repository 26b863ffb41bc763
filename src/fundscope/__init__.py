"""
fundscope - data layer of a mutual fund discovery application.

Fetches the fund list from the REST backend, normalizes drifting field names
into a canonical ``Fund`` record, and applies the client-side filter chain
(category exclusion, keyword categories with fallback, free-text search,
numeric ranges) before handing a bounded window to the caller.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .data_pipeline import (
    FetchError,
    Fund,
    FundPipelineError,
    FundQueryOptions,
    FundsFetcher,
    normalize_fund,
    normalize_funds,
)
from .engines import (
    DisplayWindow,
    FundEngineError,
    FundFilters,
    analyze_overlap,
    filter_funds,
    get_category,
    get_preset,
)
from .persistence import FundListStore, JsonFileListRepository
from .services import BrowseResult, FundQueryService, FundQueryState
from .settings import FundscopeSettings, load_settings

__all__ = [
    "__version__",
    "BrowseResult",
    "DisplayWindow",
    "FetchError",
    "Fund",
    "FundEngineError",
    "FundFilters",
    "FundListStore",
    "FundPipelineError",
    "FundQueryOptions",
    "FundQueryService",
    "FundQueryState",
    "FundsFetcher",
    "FundscopeSettings",
    "JsonFileListRepository",
    "analyze_overlap",
    "filter_funds",
    "get_category",
    "get_preset",
    "load_settings",
    "normalize_fund",
    "normalize_funds",
]
