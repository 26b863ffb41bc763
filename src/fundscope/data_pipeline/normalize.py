"""Map raw fund payloads with drifting field names onto the canonical ``Fund``."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np
import pandas as pd

from fundscope.data_pipeline.schemas import REQUIRED_FUND_COLUMNS, validate_fund_frame
from fundscope.data_pipeline.types import Fund

# canonical field -> ordered source paths; the first usable value wins.
FIELD_SOURCES: dict[str, tuple[str, ...]] = {
    "id": ("schemeCode", "id", "fundId"),
    "name": ("schemeName", "name"),
    "fund_house": ("amc.name", "amcName", "fundHouse"),
    "category": ("category",),
    "sub_category": ("subCategory",),
    "nav": ("nav.value", "currentNav", "nav", "performances.0.nav"),
    "returns_1y": ("returns.1Y", "returns.oneYear", "returns1Y"),
    "returns_3y": ("returns.3Y", "returns.threeYear", "returns3Y"),
    "returns_5y": ("returns.5Y", "returns.fiveYear", "returns5Y"),
    "aum": ("aum.value", "aum"),
    "expense_ratio": ("expenseRatio.value", "expenseRatio"),
    "rating": ("rating", "ratings.morningstar"),
}

TEXT_FIELDS = ("id", "name", "category")
OPTIONAL_TEXT_FIELDS = ("fund_house", "sub_category")
NUMERIC_FIELDS = (
    "nav",
    "returns_1y",
    "returns_3y",
    "returns_5y",
    "aum",
    "expense_ratio",
    "rating",
)

RATING_MIN = 0.0
RATING_MAX = 5.0

_MISSING = object()
_NUMERIC_NOISE_RE = re.compile(r"[,\s%₹]")

SUB_CATEGORY_SPECIAL_CASES = {
    "large_cap": "Large Cap",
    "mid_cap": "Mid Cap",
    "small_cap": "Small Cap",
    "flexi_cap": "Flexi Cap",
    "multi_cap": "Multi Cap",
    "large_and_mid_cap": "Large & Mid Cap",
    "large_&_mid_cap": "Large & Mid Cap",
    "sectoral_thematic": "Sectoral/Thematic",
    "sectoral/thematic": "Sectoral/Thematic",
    "dividend_yield": "Dividend Yield",
    "ultra_short_duration": "Ultra Short Duration",
    "low_duration": "Low Duration",
    "money_market": "Money Market",
    "short_duration": "Short Duration",
    "medium_duration": "Medium Duration",
    "medium_to_long_duration": "Medium to Long Duration",
    "long_duration": "Long Duration",
    "dynamic_bond": "Dynamic Bond",
    "corporate_bond": "Corporate Bond",
    "credit_risk": "Credit Risk",
    "banking_&_psu": "Banking & PSU",
    "banking_and_psu": "Banking & PSU",
    "conservative_hybrid": "Conservative Hybrid",
    "balanced_hybrid": "Balanced Hybrid",
    "aggressive_hybrid": "Aggressive Hybrid",
    "dynamic_asset_allocation": "Dynamic Asset Allocation",
    "multi_asset_allocation": "Multi Asset Allocation",
    "equity_savings": "Equity Savings",
    "fund_of_funds_domestic": "Fund of Funds - Domestic",
    "fund_of_funds_overseas": "Fund of Funds - Overseas",
    "tax_saving": "Tax Saving",
}

VALID_SUB_CATEGORIES = frozenset(SUB_CATEGORY_SPECIAL_CASES.values()) | {
    "Focused",
    "Value",
    "Contra",
    "Liquid",
    "Overnight",
    "Gilt",
    "Floater",
    "Arbitrage",
    "Gold",
    "Silver",
    "Index",
    "Retirement",
}

CATEGORY_DISPLAY_NAMES = {
    "equity": "Equity",
    "debt": "Debt",
    "hybrid": "Hybrid",
    "commodity": "Commodity",
    "etf": "ETF",
    "index": "Index",
    "elss": "ELSS",
    "solution_oriented": "Solution Oriented",
    "international": "International",
}


def lookup_path(raw: Any, path: str) -> Any:
    """Walk a dotted path through nested mappings and lists."""
    current = raw
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def to_finite_float(value: Any) -> float | None:
    """Coerce *value* to a finite float, or ``None`` when that is not possible."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.number)):
        try:
            parsed = float(value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        text = _NUMERIC_NOISE_RE.sub("", value)
        if not text:
            return None
        try:
            parsed = float(text)
        except ValueError:
            return None
    else:
        return None
    if not np.isfinite(parsed):
        return None
    return parsed


def _to_text(value: Any) -> str | None:
    if value is None or isinstance(value, (bool, Mapping, list, tuple)):
        return None
    if isinstance(value, float) and not np.isfinite(value):
        return None
    text = str(value).strip()
    return text or None


def resolve_field(raw: Mapping[str, Any], paths: Iterable[str], default: Any = None, *, numeric: bool = False) -> Any:
    """Return the first usable value along *paths*.

    Empty strings, zero and non-coercible values are skipped, so a later
    spelling can still supply the field; if nothing qualifies *default* is
    returned.
    """
    for path in paths:
        candidate = lookup_path(raw, path)
        if candidate is _MISSING:
            continue
        if numeric:
            parsed = to_finite_float(candidate)
            if parsed:
                return parsed
        else:
            text = _to_text(candidate)
            if text:
                return text
    return default


def normalize_fund(raw: Mapping[str, Any]) -> Fund:
    """Build a canonical ``Fund``; never raises for missing or malformed fields."""
    values: dict[str, Any] = {}
    for name in TEXT_FIELDS:
        values[name] = resolve_field(raw, FIELD_SOURCES[name], "")
    for name in OPTIONAL_TEXT_FIELDS:
        values[name] = resolve_field(raw, FIELD_SOURCES[name], None)
    for name in NUMERIC_FIELDS:
        values[name] = resolve_field(raw, FIELD_SOURCES[name], 0.0, numeric=True)

    values["rating"] = min(RATING_MAX, max(RATING_MIN, values["rating"]))
    return Fund(**values)


def normalize_funds(raws: Iterable[Any]) -> list[Fund]:
    return [normalize_fund(raw) for raw in raws if isinstance(raw, Mapping)]


def format_category(value: str | None) -> str:
    """``LARGE_CAP`` -> ``Large Cap``; empty input -> ``Other``."""
    if not value:
        return "Other"
    return " ".join(word[:1].upper() + word[1:].lower() for word in str(value).split("_") if word)


def normalize_category(value: str | None) -> str:
    return str(value or "").strip().lower()


def category_display_name(value: str | None) -> str:
    if not value:
        return ""
    key = str(value).lower()
    return CATEGORY_DISPLAY_NAMES.get(key, key[:1].upper() + key[1:])


def normalize_sub_category(value: str | None) -> str:
    """Normalize sub-category spellings (``LARGE_CAP``, ``LargeCap``, ``large cap``) to ``Large Cap``."""
    if not value:
        return ""
    text = str(value)
    if text in VALID_SUB_CATEGORIES:
        return text

    key = re.sub(r"\s+", "_", text.lower())
    if key in SUB_CATEGORY_SPECIAL_CASES:
        return SUB_CATEGORY_SPECIAL_CASES[key]

    spaced = re.sub(r"([A-Z])", r" \1", text.replace("_", " ")).strip()
    words = []
    for word in spaced.split():
        if word.lower() in {"and", "of", "to"}:
            words.append(word.lower())
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def funds_to_frame(funds: Iterable[Fund]) -> pd.DataFrame:
    """Tabular view of normalized funds, validated against the fund frame schema."""
    frame = pd.DataFrame([fund.to_dict() for fund in funds], columns=REQUIRED_FUND_COLUMNS)
    return validate_fund_frame(frame)
