"""Holdings overlap between 2-5 funds.

Each holding is keyed by its upper-cased ticker when present, otherwise by its
lower-cased name. Weighted overlap is the sum of per-holding minimum weights
(in percentage points) across the common holdings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import combinations
from typing import Any

from fundscope.data_pipeline.normalize import resolve_field
from fundscope.engines.errors import OverlapInputError

MIN_OVERLAP_FUNDS = 2
MAX_OVERLAP_FUNDS = 5
TOP_UNIQUE_HOLDINGS = 5


@dataclass(frozen=True)
class Holding:
    name: str
    percentage: float
    ticker: str | None = None
    sector: str | None = None

    @property
    def key(self) -> str:
        if self.ticker:
            return self.ticker.strip().upper()
        return " ".join(self.name.lower().split())


@dataclass(frozen=True)
class FundHoldings:
    id: str
    name: str
    holdings: tuple[Holding, ...] = ()
    category: str = ""

    def by_key(self) -> dict[str, Holding]:
        merged: dict[str, Holding] = {}
        for holding in self.holdings:
            existing = merged.get(holding.key)
            if existing is None:
                merged[holding.key] = holding
            else:
                merged[holding.key] = Holding(
                    name=existing.name,
                    percentage=existing.percentage + holding.percentage,
                    ticker=existing.ticker,
                    sector=existing.sector or holding.sector,
                )
        return merged


@dataclass
class PairwiseOverlap:
    fund1_id: str
    fund2_id: str
    jaccard_similarity: float
    weighted_overlap: float
    common_holdings_count: int
    overlap_percentage: float


@dataclass
class OverlapReport:
    funds: list[FundHoldings]
    pairwise: list[PairwiseOverlap]
    common_holdings: list[dict[str, Any]]
    unique_holdings: list[dict[str, Any]]
    overall: dict[str, float]
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def normalize_holdings(raw: Iterable[Any] | None) -> tuple[Holding, ...]:
    """Read ``companyName | name`` and ``percent | percentage`` from raw holding rows."""
    out: list[Holding] = []
    for item in raw or ():
        if not isinstance(item, Mapping):
            continue
        name = resolve_field(item, ("companyName", "name"), "")
        if not name:
            continue
        out.append(
            Holding(
                name=name,
                percentage=resolve_field(item, ("percent", "percentage", "weight"), 0.0, numeric=True),
                ticker=resolve_field(item, ("ticker", "symbol"), None),
                sector=resolve_field(item, ("sector",), None),
            )
        )
    return tuple(out)


def fund_holdings_from_raw(raw: Mapping[str, Any]) -> FundHoldings:
    return FundHoldings(
        id=resolve_field(raw, ("schemeCode", "id", "fundId"), ""),
        name=resolve_field(raw, ("schemeName", "name"), ""),
        holdings=normalize_holdings(raw.get("holdings")),
        category=resolve_field(raw, ("category",), ""),
    )


def pairwise_overlap(first: FundHoldings, second: FundHoldings) -> PairwiseOverlap:
    a = first.by_key()
    b = second.by_key()
    common = a.keys() & b.keys()
    union = a.keys() | b.keys()

    jaccard = len(common) / len(union) if union else 0.0
    weighted = sum(min(a[key].percentage, b[key].percentage) for key in common)
    smaller = min(len(a), len(b))
    overlap_pct = (len(common) / smaller * 100.0) if smaller else 0.0

    return PairwiseOverlap(
        fund1_id=first.id,
        fund2_id=second.id,
        jaccard_similarity=round(jaccard, 4),
        weighted_overlap=round(weighted, 4),
        common_holdings_count=len(common),
        overlap_percentage=round(overlap_pct, 2),
    )


def _validate_selection(funds: Sequence[FundHoldings]) -> None:
    if not MIN_OVERLAP_FUNDS <= len(funds) <= MAX_OVERLAP_FUNDS:
        raise OverlapInputError(
            f"overlap analysis needs {MIN_OVERLAP_FUNDS}-{MAX_OVERLAP_FUNDS} funds, got {len(funds)}",
            user_message=f"Select between {MIN_OVERLAP_FUNDS} and {MAX_OVERLAP_FUNDS} funds to compare.",
        )
    ids = [fund.id for fund in funds]
    if len(set(ids)) != len(ids):
        raise OverlapInputError(f"duplicate fund ids in overlap selection: {ids}")
    empty = [fund.id for fund in funds if not fund.holdings]
    if empty:
        raise OverlapInputError(
            f"funds without holdings data: {empty}",
            user_message="Holdings data is not available for every selected fund.",
        )


def analyze_overlap(funds: Sequence[FundHoldings]) -> OverlapReport:
    _validate_selection(funds)
    keyed = [fund.by_key() for fund in funds]

    pairwise = [pairwise_overlap(a, b) for a, b in combinations(funds, 2)]

    common_keys = set(keyed[0])
    for holdings in keyed[1:]:
        common_keys &= holdings.keys()

    common_holdings: list[dict[str, Any]] = []
    for key in common_keys:
        reference = keyed[0][key]
        held_by = [
            {"fund_id": fund.id, "fund_name": fund.name, "percentage": holdings[key].percentage}
            for fund, holdings in zip(funds, keyed)
        ]
        common_holdings.append(
            {
                "key": key,
                "name": reference.name,
                "ticker": reference.ticker,
                "sector": reference.sector,
                "held_by": held_by,
                "avg_percentage": round(sum(row["percentage"] for row in held_by) / len(held_by), 4),
            }
        )
    common_holdings.sort(key=lambda row: (-row["avg_percentage"], row["key"]))

    unique_holdings: list[dict[str, Any]] = []
    for idx, (fund, holdings) in enumerate(zip(funds, keyed)):
        others: set[str] = set()
        for jdx, other in enumerate(keyed):
            if jdx != idx:
                others |= other.keys()
        unique = sorted(
            (holdings[key] for key in holdings.keys() - others),
            key=lambda h: (-h.percentage, h.key),
        )
        unique_holdings.append(
            {
                "fund_id": fund.id,
                "fund_name": fund.name,
                "unique_count": len(unique),
                "unique_percentage": round(sum(h.percentage for h in unique), 4),
                "top_unique_holdings": unique[:TOP_UNIQUE_HOLDINGS],
            }
        )

    weighted = [row.weighted_overlap for row in pairwise]
    overall = {
        "total_common_holdings": float(len(common_holdings)),
        "avg_jaccard_similarity": round(sum(row.jaccard_similarity for row in pairwise) / len(pairwise), 4),
        "avg_weighted_overlap": round(sum(weighted) / len(weighted), 4),
        "max_overlap": max(weighted),
        "min_overlap": min(weighted),
    }

    return OverlapReport(
        funds=list(funds),
        pairwise=pairwise,
        common_holdings=common_holdings,
        unique_holdings=unique_holdings,
        overall=overall,
    )
