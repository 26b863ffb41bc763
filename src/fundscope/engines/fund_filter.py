"""Client-side predicate filter chain over normalized funds."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fundscope.data_pipeline.logging_utils import log_event
from fundscope.data_pipeline.normalize import normalize_category
from fundscope.data_pipeline.types import Fund
from fundscope.engines.categories import CategoryDefinition, PagePreset, get_category, matches
from fundscope.engines.errors import FundEngineValidationError

LOGGER = logging.getLogger("fundscope.engines.fund_filter")

CATEGORY_FALLBACK_THRESHOLD = 50
SUGGESTION_MIN_QUERY = 2
SUGGESTION_LIMIT = 10


@dataclass(frozen=True)
class FundFilters:
    exclude_categories: tuple[str, ...] = ()
    scope: CategoryDefinition | None = None
    category: CategoryDefinition | None = None
    search: str = ""
    min_expense_ratio: float | None = None
    max_expense_ratio: float | None = None
    min_rating: float | None = None
    min_aum: float | None = None
    fallback_threshold: int = CATEGORY_FALLBACK_THRESHOLD

    def __post_init__(self) -> None:
        if (
            self.min_expense_ratio is not None
            and self.max_expense_ratio is not None
            and self.min_expense_ratio > self.max_expense_ratio
        ):
            raise FundEngineValidationError(
                f"min_expense_ratio {self.min_expense_ratio} exceeds max_expense_ratio {self.max_expense_ratio}",
                user_message="Minimum expense ratio cannot be above the maximum.",
            )
        if self.fallback_threshold < 0:
            raise FundEngineValidationError("fallback_threshold must be >= 0")

    @classmethod
    def for_page(
        cls,
        preset: PagePreset,
        *,
        category_value: str | None = None,
        search: str = "",
        **ranges: float | None,
    ) -> "FundFilters":
        return cls(
            exclude_categories=preset.exclude_categories,
            scope=preset.scope,
            category=get_category(preset.name, category_value),
            search=search,
            fallback_threshold=preset.fallback_threshold,
            **ranges,
        )


def search_terms(query: str | None) -> list[str]:
    """Lower-case, collapse whitespace and split a free-text query."""
    return str(query or "").lower().split()


def matches_search(fund: Fund, terms: Sequence[str]) -> bool:
    name = fund.name.lower()
    return all(term in name for term in terms)


def _in_ranges(fund: Fund, filters: FundFilters) -> bool:
    # A zero value is the "unknown" default and is never filtered out.
    if fund.expense_ratio:
        if filters.min_expense_ratio is not None and fund.expense_ratio < filters.min_expense_ratio:
            return False
        if filters.max_expense_ratio is not None and fund.expense_ratio > filters.max_expense_ratio:
            return False
    if fund.rating and filters.min_rating is not None and fund.rating < filters.min_rating:
        return False
    if fund.aum and filters.min_aum is not None and fund.aum < filters.min_aum:
        return False
    return True


def filter_funds(funds: Sequence[Fund], filters: FundFilters) -> list[Fund]:
    """Apply the filter chain conjunctively and return the surviving funds in input order."""
    excluded = {normalize_category(c) for c in filters.exclude_categories if c.strip()}
    filtered = [fund for fund in funds if normalize_category(fund.category) not in excluded]

    if filters.scope is not None:
        filtered = [fund for fund in filtered if matches(fund, filters.scope)]

    category = filters.category
    if category is not None and category.keywords:
        by_category = [fund for fund in filtered if matches(fund, category)]
        if len(by_category) >= filters.fallback_threshold:
            filtered = by_category
        else:
            log_event(
                LOGGER,
                "category_filter_fallback",
                category=category.value,
                matched=len(by_category),
                threshold=filters.fallback_threshold,
                kept=len(filtered),
            )

    terms = search_terms(filters.search)
    if terms:
        filtered = [fund for fund in filtered if matches_search(fund, terms)]

    return [fund for fund in filtered if _in_ranges(fund, filters)]


def suggest_funds(
    funds: Sequence[Fund],
    query: str | None,
    *,
    scope: CategoryDefinition | None = None,
    limit: int = SUGGESTION_LIMIT,
) -> list[Fund]:
    """Name-substring suggestions for a search box; short queries yield nothing."""
    text = str(query or "").strip().lower()
    if len(text) < SUGGESTION_MIN_QUERY:
        return []
    pool = funds if scope is None else [fund for fund in funds if matches(fund, scope)]
    return [fund for fund in pool if text in fund.name.lower()][: max(0, limit)]
