"""Unit tests for fundscope.services.fund_query_service."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from fundscope.data_pipeline import FetchError, FetchResult, FundQueryOptions
from fundscope.services import FundQueryService


def _raw_debt_payload() -> dict:
    data = [{"id": f"liq-{idx}", "name": f"Nova Liquid Fund {idx}", "category": "Debt"} for idx in range(60)]
    data += [{"id": f"gilt-{idx}", "name": f"Nova Gilt Fund {idx}", "category": "Debt"} for idx in range(600)]
    data += [{"id": f"eq-{idx}", "name": f"Nova Equity Fund {idx}", "category": "Equity"} for idx in range(5)]
    return {"data": data, "pagination": {"total": len(data), "page": 1, "limit": 5000, "hasNext": False}}


def _result(*names: str) -> FetchResult:
    return FetchResult(
        raw_funds=[{"id": name.lower(), "name": name} for name in names],
        pagination=None,
        pages_fetched=1,
        fetched_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def service(make_fetcher) -> FundQueryService:
    return FundQueryService(make_fetcher(lambda request: httpx.Response(200, json=_raw_debt_payload())))


class TestLoad:
    def test_initial_state(self, service):
        assert service.state.status == "idle"
        assert service.state.funds == ()

    def test_success(self, service):
        state = service.load(FundQueryOptions(category="debt"))
        assert state.status == "success"
        assert not state.loading
        assert len(state.funds) == 665
        assert state.pagination.total == 665
        assert state.options == FundQueryOptions(category="debt")

    def test_error_keeps_stale_funds(self, make_fetcher):
        responses = [
            httpx.Response(200, json={"data": [{"id": "a", "name": "A Fund"}]}),
            httpx.Response(500, json={"message": "db down"}),
        ]
        service = FundQueryService(make_fetcher(lambda request: responses.pop(0)))

        service.load(FundQueryOptions())
        state = service.refetch()

        assert state.status == "error"
        assert "db down" in state.error
        assert [fund.id for fund in state.funds] == ["a"]

    def test_load_fund(self, make_fetcher):
        service = FundQueryService(
            make_fetcher(lambda request: httpx.Response(200, json={"data": {"schemeCode": 7, "schemeName": "Seven"}}))
        )
        fund = service.load_fund("7")
        assert fund.id == "7"
        assert fund.name == "Seven"

    def test_oversized_numbers_do_not_break_loading(self, make_fetcher):
        body = b'{"data": [{"id": "x", "name": "X Fund", "aum": 1' + b"0" * 400 + b"}]}"
        service = FundQueryService(
            make_fetcher(lambda request: httpx.Response(200, content=body, headers={"Content-Type": "application/json"}))
        )
        state = service.load(FundQueryOptions())
        assert state.status == "success"
        assert state.funds[0].aum == 0.0


class TestStaleResponses:
    def test_superseded_response_is_dropped(self, service):
        first = service.begin(FundQueryOptions(category="debt"))
        second = service.begin(FundQueryOptions(category="equity"))

        assert second > first
        assert service.complete(first, _result("Old Fund")) is False
        assert service.state.loading
        assert service.state.funds == ()

        assert service.complete(second, _result("New Fund")) is True
        assert [fund.name for fund in service.state.funds] == ["New Fund"]
        assert service.state.options == FundQueryOptions(category="equity")

    def test_superseded_error_is_dropped(self, service):
        first = service.begin(FundQueryOptions())
        second = service.begin(FundQueryOptions())
        service.complete(second, _result("Fresh Fund"))

        assert service.fail(first, FetchError("late failure")) is False
        assert service.state.status == "success"
        assert service.state.error is None


class TestBrowse:
    def test_debt_page_with_category(self, service):
        result = service.browse("debt", category_value="liquid")
        assert result.title == "Liquid Funds"
        assert result.category.value == "liquid"
        assert len(result.funds) == 665
        assert len(result.filtered) == 60
        assert len(result.displayed) == 60
        assert result.distribution == {"Debt": 660, "Equity": 5}

    def test_fallback_and_window(self, service):
        result = service.browse("debt", category_value="corporatebond")
        assert result.title == "Corporatebond Funds"
        assert len(result.filtered) == 660
        assert len(result.displayed) == 500
        assert len(result.load_more()) == 660
        assert not result.window.has_more

    def test_default_title(self, service):
        assert service.browse("debt").title == "All Debt Funds"

    def test_requests_page_category_with_bulk_limit(self, make_fetcher):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        FundQueryService(make_fetcher(handler)).browse("equity")
        assert seen[0].url.params["category"] == "equity"
        assert seen[0].url.params["limit"] == "5000"

    def test_commodity_page_sorted_by_one_year_return(self, make_fetcher):
        payload = {
            "data": [
                {"id": "g1", "name": "Nova Gold Fund", "category": "Commodity", "returns": {"1Y": 8.5}},
                {"id": "s1", "name": "Nova Silver Fund", "category": "Commodity", "returns": {"1Y": 21.0}},
                {"id": "g2", "name": "Axis Gold ETF", "category": "Commodity"},
                {"id": "d1", "name": "Nova Liquid Fund", "category": "Debt", "returns": {"1Y": 40.0}},
                {"id": "g3", "name": "Tata Gold Fund", "category": "Commodity", "returns": {"1Y": 8.5}},
            ]
        }
        service = FundQueryService(make_fetcher(lambda request: httpx.Response(200, json=payload)))
        result = service.browse("commodity")
        assert [fund.id for fund in result.filtered] == ["s1", "g1", "g3", "g2"]
        assert result.title == "All Commodity Funds"

    def test_debt_page_keeps_input_order(self, service):
        result = service.browse("debt", category_value="liquid")
        assert [fund.id for fund in result.filtered[:3]] == ["liq-0", "liq-1", "liq-2"]

    def test_commodity_page_sends_no_category(self, make_fetcher):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        FundQueryService(make_fetcher(handler)).browse("commodity")
        assert "category" not in seen[0].url.params

    def test_error_is_reported_inline(self, make_fetcher):
        service = FundQueryService(make_fetcher(lambda request: httpx.Response(404, json={})))
        result = service.browse("debt", search="hdfc")
        assert result.error.startswith("Not Found:")
        assert result.funds == []
        assert result.displayed == []
