from __future__ import annotations

from fundscope.engines.categories import (
    COMMODITY_CATEGORIES,
    DEBT_CATEGORIES,
    EQUITY_CATEGORIES,
    PAGE_PRESETS,
    CategoryDefinition,
    PagePreset,
    category_distribution,
    category_title,
    get_category,
    get_preset,
    matches,
)
from fundscope.engines.errors import FundEngineError, FundEngineValidationError, OverlapInputError
from fundscope.engines.fund_filter import (
    CATEGORY_FALLBACK_THRESHOLD,
    FundFilters,
    filter_funds,
    search_terms,
    suggest_funds,
)
from fundscope.engines.overlap import (
    FundHoldings,
    Holding,
    OverlapReport,
    analyze_overlap,
    fund_holdings_from_raw,
    normalize_holdings,
    pairwise_overlap,
)
from fundscope.engines.pagination import INITIAL_DISPLAY_LIMIT, LOAD_MORE_STEP, DisplayWindow

__all__ = [
    "CATEGORY_FALLBACK_THRESHOLD",
    "COMMODITY_CATEGORIES",
    "DEBT_CATEGORIES",
    "EQUITY_CATEGORIES",
    "INITIAL_DISPLAY_LIMIT",
    "LOAD_MORE_STEP",
    "PAGE_PRESETS",
    "CategoryDefinition",
    "DisplayWindow",
    "FundEngineError",
    "FundEngineValidationError",
    "FundFilters",
    "FundHoldings",
    "Holding",
    "OverlapInputError",
    "OverlapReport",
    "PagePreset",
    "analyze_overlap",
    "category_distribution",
    "category_title",
    "filter_funds",
    "fund_holdings_from_raw",
    "get_category",
    "get_preset",
    "matches",
    "normalize_holdings",
    "pairwise_overlap",
    "search_terms",
    "suggest_funds",
]
