"""Shared pytest fixtures for fundscope tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from fundscope.data_pipeline import Fund, FundsFetcher
from fundscope.settings import FundscopeSettings


def make_fund(
    name: str,
    category: str = "Debt",
    *,
    sub_category: str | None = None,
    fund_id: str | None = None,
    expense_ratio: float = 0.0,
    rating: float = 0.0,
    aum: float = 0.0,
) -> Fund:
    return Fund(
        id=fund_id or name.lower().replace(" ", "-"),
        name=name,
        fund_house=None,
        category=category,
        sub_category=sub_category,
        expense_ratio=expense_ratio,
        rating=rating,
        aum=aum,
    )


@pytest.fixture
def raw_funds() -> list[dict[str, Any]]:
    """Raw API payloads using the different field spellings seen in the wild."""
    return [
        {
            "schemeCode": 118834,
            "schemeName": "HDFC Top 100 Fund",
            "amc": {"name": "HDFC Mutual Fund"},
            "category": "Equity",
            "subCategory": "LARGE_CAP",
            "nav": {"value": 1012.45},
            "returns": {"1Y": 18.2, "3Y": 14.1, "5Y": 12.9},
            "aum": {"value": 35000.5},
            "expenseRatio": {"value": 1.05},
            "rating": 4,
        },
        {
            "id": "sbi-small",
            "name": "SBI Small Cap Fund",
            "amcName": "SBI Mutual Fund",
            "category": "Equity",
            "subCategory": "Small Cap",
            "currentNav": "154.20",
            "returns": {"oneYear": 22.5, "threeYear": "19.3"},
            "aum": 28000,
            "expenseRatio": "0.68%",
            "ratings": {"morningstar": 5},
        },
        {
            "fundId": "icici-liquid",
            "name": "ICICI Prudential Liquid Fund",
            "fundHouse": "ICICI Prudential",
            "category": "Debt",
            "performances": [{"nav": 342.1}],
            "returns1Y": 7.1,
            "returns3Y": None,
            "expenseRatio": "n/a",
            "rating": "NaN",
        },
    ]


@pytest.fixture
def fund_sample() -> list[Fund]:
    """200 funds: 10 equity, 10 liquid debt, 180 gilt debt."""
    funds = [make_fund(f"Nova Equity Fund {idx}", "Equity") for idx in range(10)]
    funds += [make_fund(f"Nova Liquid Fund {idx}", "Debt") for idx in range(10)]
    funds += [make_fund(f"Nova Gilt Fund {idx}", "Debt") for idx in range(180)]
    return funds


@pytest.fixture
def settings(tmp_path: Path) -> FundscopeSettings:
    return FundscopeSettings.from_env(
        environ={
            "FUNDSCOPE_API_URL": "http://api.test/api/",
            "FUNDSCOPE_LIST_STORE": str(tmp_path / "lists.json"),
        }
    )


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_fetcher(settings: FundscopeSettings) -> Callable[[Handler], FundsFetcher]:
    """Build a ``FundsFetcher`` whose HTTP traffic is served by *handler*."""

    def _factory(handler: Handler) -> FundsFetcher:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return FundsFetcher(settings, client=client)

    return _factory


@pytest.fixture
def fund_factory() -> Callable[..., Fund]:
    return make_fund
