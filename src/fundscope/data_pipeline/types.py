from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Fund:
    """Canonical fund record produced by the normalizer."""

    id: str
    name: str
    fund_house: str | None
    category: str
    sub_category: str | None
    nav: float = 0.0
    returns_1y: float = 0.0
    returns_3y: float = 0.0
    returns_5y: float = 0.0
    aum: float = 0.0
    expense_ratio: float = 0.0
    rating: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FundQueryOptions:
    """Query options sent to ``GET /funds``; equal options describe the same query."""

    type: str | None = None
    category: str | None = None
    query: str | None = None
    sub_category: str | None = None
    limit: int | None = 5_000
    page: int | None = None


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool = False
    has_prev: bool = False


@dataclass
class FundPage:
    """One validated ``GET /funds`` response."""

    data: list[dict[str, Any]]
    pagination: Pagination | None
    url: str
    fetched_at: datetime
    message: str | None = None


@dataclass
class FetchResult:
    """Raw fund payloads gathered across one or more pages."""

    raw_funds: list[dict[str, Any]]
    pagination: Pagination | None
    pages_fetched: int
    fetched_at: datetime
    errors: list[dict[str, Any]] = field(default_factory=list)
