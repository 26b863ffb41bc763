"""Keyword-based category definitions and the matcher that applies them.

Matching is plain substring containment over
``"{name} {category} {sub_category}"`` (lower-cased). There is no stemming or
tokenization, so short keywords such as ``"short"`` also hit unrelated names.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from fundscope.data_pipeline.types import Fund


@dataclass(frozen=True)
class CategoryDefinition:
    label: str
    value: str
    keywords: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "keywords", tuple(k.lower() for k in self.keywords))
        object.__setattr__(self, "excludes", tuple(k.lower() for k in self.excludes))


@dataclass(frozen=True)
class PagePreset:
    """Static filter configuration of one browse page."""

    name: str
    api_category: str | None
    categories: tuple[CategoryDefinition, ...]
    exclude_categories: tuple[str, ...] = ()
    scope: CategoryDefinition | None = None
    fallback_threshold: int = 50
    sort_by: str | None = None


ALL_FUNDS = CategoryDefinition(label="All Funds", value="")

DEBT_CATEGORIES: tuple[CategoryDefinition, ...] = (
    ALL_FUNDS,
    CategoryDefinition(
        label="Liquid Funds",
        value="liquid",
        keywords=("liquid", "overnight", "ultrashort", "moneymarket", "cash"),
    ),
    CategoryDefinition(
        label="Short Duration",
        value="shortduration",
        keywords=("shortduration", "short duration", "short term", "lowduration", "shortmaturity", "short"),
    ),
    CategoryDefinition(
        label="Corporate Bond",
        value="corporatebond",
        keywords=("corporatebond", "corporate bond", "corporate debt", "corporate", "credit risk"),
    ),
    CategoryDefinition(
        label="Banking & PSU",
        value="bankingpsu",
        keywords=("bankingpsu", "banking", "psu", "banking psu", "public sector", "bank"),
    ),
    CategoryDefinition(
        label="Dynamic Bond",
        value="dynamicbond",
        keywords=(
            "dynamicbond",
            "dynamic bond",
            "dynamic debt",
            "income",
            "dynamic",
            "long duration",
            "medium duration",
            "gilt",
        ),
    ),
)

EQUITY_CATEGORIES: tuple[CategoryDefinition, ...] = (
    ALL_FUNDS,
    CategoryDefinition(label="Large Cap", value="largecap", keywords=("large cap", "largecap", "large-cap")),
    CategoryDefinition(label="Mid Cap", value="midcap", keywords=("mid cap", "midcap", "mid-cap")),
    CategoryDefinition(label="Small Cap", value="smallcap", keywords=("small cap", "smallcap", "small-cap")),
    CategoryDefinition(label="Multi Cap", value="multicap", keywords=("multi cap", "multicap", "multi-cap")),
    CategoryDefinition(
        label="Flexi Cap",
        value="flexicap",
        keywords=("flexi cap", "flexicap", "flexi-cap", "flexible cap"),
    ),
    CategoryDefinition(
        label="Index Funds",
        value="indexfund",
        keywords=("index fund", "index", "nifty", "sensex", "bse", "nse", "indexfund"),
    ),
)

COMMODITY_SCOPE = CategoryDefinition(
    label="Commodity",
    value="commodity",
    keywords=(
        "commodity",
        "commodities",
        "gold",
        "silver",
        "platinum",
        "palladium",
        "metal",
        "metals",
        "preciousmetal",
        "bullion",
        "etfgold",
        "goldetf",
        "etfsilver",
        "silveretf",
        "goldfund",
        "silverfund",
        "goldsavings",
        "goldexchange",
        "golddeposit",
        "mcx",
        "ncdex",
    ),
)

COMMODITY_CATEGORIES: tuple[CategoryDefinition, ...] = (
    ALL_FUNDS,
    CategoryDefinition(label="Gold", value="gold", keywords=("gold",)),
    CategoryDefinition(label="Silver", value="silver", keywords=("silver",)),
    CategoryDefinition(
        label="Multi Commodity",
        value="multi-commodity",
        keywords=("commodity", "multi", "metal", "platinum", "palladium"),
        excludes=("gold", "silver"),
    ),
)

PAGE_PRESETS: dict[str, PagePreset] = {
    "debt": PagePreset(
        name="debt",
        api_category="debt",
        categories=DEBT_CATEGORIES,
        exclude_categories=("equity",),
        fallback_threshold=50,
    ),
    "equity": PagePreset(
        name="equity",
        api_category="equity",
        categories=EQUITY_CATEGORIES,
        fallback_threshold=0,
    ),
    "commodity": PagePreset(
        name="commodity",
        api_category=None,
        categories=COMMODITY_CATEGORIES,
        scope=COMMODITY_SCOPE,
        fallback_threshold=0,
        sort_by="returns_1y",
    ),
}


def search_text(fund: Fund) -> str:
    return f"{fund.name} {fund.category or ''} {fund.sub_category or ''}".lower()


def matches(fund: Fund, category: CategoryDefinition) -> bool:
    """True when any keyword is a substring of the fund's search text and no exclude keyword is."""
    text = search_text(fund)
    if category.excludes and any(keyword in text for keyword in category.excludes):
        return False
    return any(keyword in text for keyword in category.keywords)


def get_preset(page: str) -> PagePreset:
    key = str(page or "").strip().lower()
    if key not in PAGE_PRESETS:
        raise KeyError(f"Unknown page preset: {page!r}; expected one of {sorted(PAGE_PRESETS)}")
    return PAGE_PRESETS[key]


def get_category(page: str, value: str | None) -> CategoryDefinition | None:
    """Resolve a ``?category=`` value; unknown values and "All Funds" resolve to ``None``."""
    key = str(value or "").strip().lower()
    if not key:
        return None
    for category in get_preset(page).categories:
        if category.value == key and category.keywords:
            return category
    return None


def category_title(value: str | None, default: str = "All Funds") -> str:
    """``short-duration`` -> ``Short Duration``."""
    if not value:
        return default
    return " ".join(word[:1].upper() + word[1:] for word in str(value).split("-") if word)


def category_distribution(funds: Iterable[Fund]) -> dict[str, int]:
    counts = Counter(fund.category or "Unknown" for fund in funds)
    return dict(counts.most_common())
