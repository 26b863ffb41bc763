"""Service layer."""

from .fund_query_service import BrowseResult, FundQueryService, FundQueryState

__all__ = ["BrowseResult", "FundQueryService", "FundQueryState"]
