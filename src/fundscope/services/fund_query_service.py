"""Stateful fund query service: fetch, normalize, filter and window a fund list.

State moves ``idle -> loading -> success | error``. Every load is tagged with
an increasing request id; a response that arrives after a newer load started
is dropped so it cannot overwrite fresher state. A failed load keeps the
previous fund list and records the error message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from threading import Lock
from typing import Literal

from fundscope.data_pipeline.errors import FundPipelineError
from fundscope.data_pipeline.fetcher import FundsFetcher
from fundscope.data_pipeline.logging_utils import log_event
from fundscope.data_pipeline.normalize import normalize_fund, normalize_funds
from fundscope.data_pipeline.types import FetchResult, Fund, FundQueryOptions, Pagination
from fundscope.engines.categories import CategoryDefinition, category_distribution, category_title, get_preset
from fundscope.engines.fund_filter import FundFilters, filter_funds
from fundscope.engines.pagination import INITIAL_DISPLAY_LIMIT, LOAD_MORE_STEP, DisplayWindow

LOGGER = logging.getLogger("fundscope.services.fund_query_service")

QueryStatus = Literal["idle", "loading", "success", "error"]


@dataclass(frozen=True)
class FundQueryState:
    status: QueryStatus = "idle"
    funds: tuple[Fund, ...] = ()
    pagination: Pagination | None = None
    error: str | None = None
    options: FundQueryOptions | None = None
    request_id: int = 0

    @property
    def loading(self) -> bool:
        return self.status == "loading"


@dataclass
class BrowseResult:
    page: str
    title: str
    category: CategoryDefinition | None
    funds: list[Fund]
    filtered: list[Fund]
    window: DisplayWindow
    error: str | None = None
    distribution: dict[str, int] = field(default_factory=dict)

    @property
    def displayed(self) -> list[Fund]:
        return self.window.displayed(self.filtered)

    def load_more(self) -> list[Fund]:
        self.window.load_more()
        return self.displayed


class FundQueryService:
    def __init__(self, fetcher: FundsFetcher, *, logger: logging.Logger | None = None) -> None:
        self.fetcher = fetcher
        self.logger = logger or LOGGER
        self._lock = Lock()
        self._state = FundQueryState()
        self._next_request_id = 0

    @property
    def state(self) -> FundQueryState:
        return self._state

    def begin(self, options: FundQueryOptions) -> int:
        """Mark a new load as in flight and return its request id."""
        with self._lock:
            self._next_request_id += 1
            request_id = self._next_request_id
            self._state = replace(
                self._state,
                status="loading",
                error=None,
                options=options,
                request_id=request_id,
            )
        return request_id

    def complete(self, request_id: int, result: FetchResult) -> bool:
        funds = tuple(normalize_funds(result.raw_funds))
        with self._lock:
            if request_id != self._state.request_id:
                log_event(self.logger, "stale_response_dropped", request_id=request_id)
                return False
            self._state = replace(
                self._state,
                status="success",
                funds=funds,
                pagination=result.pagination,
                error=None,
            )
        log_event(
            self.logger,
            "funds_loaded",
            logging.DEBUG,
            request_id=request_id,
            count=len(funds),
            categories=category_distribution(funds),
        )
        return True

    def fail(self, request_id: int, error: Exception) -> bool:
        with self._lock:
            if request_id != self._state.request_id:
                log_event(self.logger, "stale_error_dropped", request_id=request_id)
                return False
            self._state = replace(self._state, status="error", error=str(error) or type(error).__name__)
        log_event(self.logger, "funds_load_failed", logging.ERROR, request_id=request_id, error=str(error))
        return True

    def load(self, options: FundQueryOptions | None = None) -> FundQueryState:
        options = options or FundQueryOptions()
        request_id = self.begin(options)
        try:
            result = self.fetcher.fetch_funds(options)
        except FundPipelineError as exc:
            self.fail(request_id, exc)
        else:
            self.complete(request_id, result)
        return self._state

    def refetch(self) -> FundQueryState:
        return self.load(self._state.options)

    def load_fund(self, fund_id: str) -> Fund:
        return normalize_fund(self.fetcher.fetch_fund(fund_id))

    def browse(
        self,
        page: str,
        *,
        category_value: str | None = None,
        search: str = "",
        display_limit: int = INITIAL_DISPLAY_LIMIT,
        step: int = LOAD_MORE_STEP,
        limit: int | None = None,
        min_expense_ratio: float | None = None,
        max_expense_ratio: float | None = None,
        min_rating: float | None = None,
        min_aum: float | None = None,
    ) -> BrowseResult:
        """Load the page's fund list, then filter and window it."""
        preset = get_preset(page)
        state = self.load(
            FundQueryOptions(
                category=preset.api_category,
                limit=limit or self.fetcher.settings.fetch_limit,
            )
        )
        filters = FundFilters.for_page(
            preset,
            category_value=category_value,
            search=search,
            min_expense_ratio=min_expense_ratio,
            max_expense_ratio=max_expense_ratio,
            min_rating=min_rating,
            min_aum=min_aum,
        )
        funds = list(state.funds)
        filtered = filter_funds(funds, filters)
        if preset.sort_by:
            # best performers first; ties keep input order
            filtered.sort(key=lambda fund: getattr(fund, preset.sort_by), reverse=True)
        log_event(
            self.logger,
            "browse_filtered",
            page=preset.name,
            category=category_value or "",
            loaded=len(funds),
            filtered=len(filtered),
        )
        return BrowseResult(
            page=preset.name,
            title=category_title(category_value, default=f"All {preset.name.title()}") + " Funds",
            category=filters.category,
            funds=funds,
            filtered=filtered,
            window=DisplayWindow(total=len(filtered), display_limit=display_limit, step=step),
            error=state.error,
            distribution=category_distribution(funds),
        )
