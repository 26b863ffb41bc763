"""
fundscope command line interface.

Usage:
    fundscope --help
    fundscope funds --page debt --category liquid --search "hdfc liquid"
    fundscope fund 118834
    fundscope categories --page commodity
    fundscope list add watchlist 118834
    fundscope overlap holdings.json
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from .data_pipeline import FundPipelineError, FundsFetcher, funds_to_frame
from .engines import PAGE_PRESETS, FundEngineError, analyze_overlap, fund_holdings_from_raw, get_preset
from .observability import configure_logging
from .persistence import LIST_NAMES, FundListStore, JsonFileListRepository, ListStoreError
from .services import FundQueryService
from .settings import FundscopeSettings, load_settings

TABLE_COLUMNS = ["id", "name", "category", "sub_category", "nav", "returns_1y", "aum", "expense_ratio", "rating"]


def build_fetcher(settings: FundscopeSettings) -> FundsFetcher:
    return FundsFetcher(settings)


def build_list_store(settings: FundscopeSettings) -> FundListStore:
    return FundListStore(JsonFileListRepository(settings.list_store_path))


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def cmd_funds(args, settings: FundscopeSettings) -> None:
    """Browse one page's funds with category, search and range filters."""
    service = FundQueryService(build_fetcher(settings))
    result = service.browse(
        args.page,
        category_value=args.category,
        search=args.search or "",
        display_limit=args.display_limit,
        limit=args.limit,
        min_expense_ratio=args.min_expense_ratio,
        max_expense_ratio=args.max_expense_ratio,
        min_rating=args.min_rating,
        min_aum=args.min_aum,
    )
    if result.error and not result.funds:
        raise FundPipelineError(result.error)

    displayed = result.displayed
    if args.json:
        _print_json(
            {
                "title": result.title,
                "total": len(result.filtered),
                "shown": len(displayed),
                "error": result.error,
                "data": [fund.to_dict() for fund in displayed],
            }
        )
        return

    print(f"{result.title}: showing {len(displayed)} of {len(result.filtered)} funds")
    if result.error:
        print(f"[WARN] {result.error}")
    if displayed:
        frame = funds_to_frame(displayed)
        print(frame[TABLE_COLUMNS].to_string(index=False))
    if result.window.has_more:
        print(f"... {result.window.remaining} more (raise --display-limit to see them)")


def cmd_fund(args, settings: FundscopeSettings) -> None:
    """Show a single fund."""
    fund = FundQueryService(build_fetcher(settings)).load_fund(args.fund_id)
    if args.json:
        _print_json(fund.to_dict())
        return
    for key, value in fund.to_dict().items():
        print(f"  {key:<14} {value if value not in (None, '') else '-'}")


def cmd_categories(args, settings: FundscopeSettings) -> None:
    """List the keyword categories of each page."""
    pages = [args.page] if args.page else sorted(PAGE_PRESETS)
    for page in pages:
        preset = get_preset(page)
        print(f"{preset.name}:")
        for category in preset.categories:
            keywords = ", ".join(category.keywords) or "(no filter)"
            print(f"  - {category.label} [{category.value or 'all'}]: {keywords}")


def cmd_list(args, settings: FundscopeSettings) -> None:
    """Show or edit the watchlist, compare and overlap lists."""
    store = build_list_store(settings)
    if args.action == "show":
        names = [args.name] if args.name else list(LIST_NAMES)
        for name in names:
            ids = store.items(name)
            print(f"{name} ({len(ids)}): {', '.join(ids) or '-'}")
        return
    if not args.name:
        raise ListStoreError(f"'list {args.action}' needs a list name")
    if args.action == "clear":
        store.clear(args.name)
        print(f"Cleared {args.name}")
        return
    if not args.fund_ids:
        raise ListStoreError(f"'list {args.action}' needs at least one fund id")
    for fund_id in args.fund_ids:
        if args.action == "add":
            ids = store.add(args.name, fund_id)
        else:
            ids = store.remove(args.name, fund_id)
    print(f"{args.name} ({len(ids)}): {', '.join(ids) or '-'}")


def _load_holdings_file(path: Path) -> list[dict[str, Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise FundPipelineError(f"Cannot read holdings file {path}: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("data", payload.get("funds"))
    if not isinstance(payload, list):
        raise FundPipelineError(f"Holdings file {path} must contain a list of funds")
    return [item for item in payload if isinstance(item, dict)]


def cmd_overlap(args, settings: FundscopeSettings) -> None:
    """Analyze holdings overlap from a JSON file or the saved overlap list."""
    if args.file:
        raw_funds = _load_holdings_file(Path(args.file))
    else:
        ids = build_list_store(settings).items("overlap")
        fetcher = build_fetcher(settings)
        raw_funds = [fetcher.fetch_fund(fund_id) for fund_id in ids]

    report = analyze_overlap([fund_holdings_from_raw(raw) for raw in raw_funds])
    if args.json:
        _print_json(
            {
                "pairwise": [asdict(row) for row in report.pairwise],
                "common_holdings": report.common_holdings,
                "unique_holdings": [
                    {**row, "top_unique_holdings": [asdict(h) for h in row["top_unique_holdings"]]}
                    for row in report.unique_holdings
                ],
                "overall": report.overall,
            }
        )
        return

    print(f"Overlap across {len(report.funds)} funds")
    for row in report.pairwise:
        print(
            f"  {row.fund1_id} vs {row.fund2_id}: jaccard={row.jaccard_similarity:.2f} "
            f"weighted={row.weighted_overlap:.2f}% common={row.common_holdings_count}"
        )
    print(f"\nCommon holdings ({len(report.common_holdings)}):")
    for row in report.common_holdings:
        print(f"  - {row['name']} (avg {row['avg_percentage']:.2f}%)")
    print("\nOverall:")
    for key, value in report.overall.items():
        print(f"  {key}: {value:g}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fundscope",
        description="fundscope - mutual fund discovery data layer",
    )
    from . import __version__

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    funds_parser = subparsers.add_parser("funds", help="Browse and filter funds")
    funds_parser.add_argument("--page", choices=sorted(PAGE_PRESETS), default="debt", help="Page preset")
    funds_parser.add_argument("--category", help="Category value, e.g. liquid or largecap")
    funds_parser.add_argument("--search", help="Free-text search over fund names")
    funds_parser.add_argument("--min-expense-ratio", type=float)
    funds_parser.add_argument("--max-expense-ratio", type=float)
    funds_parser.add_argument("--min-rating", type=float)
    funds_parser.add_argument("--min-aum", type=float)
    funds_parser.add_argument("--limit", type=int, help="Funds to request from the API")
    funds_parser.add_argument("--display-limit", type=int, default=500, help="Funds to print")
    funds_parser.add_argument("--json", action="store_true", help="Print JSON")
    funds_parser.set_defaults(func=cmd_funds)

    fund_parser = subparsers.add_parser("fund", help="Show one fund")
    fund_parser.add_argument("fund_id")
    fund_parser.add_argument("--json", action="store_true", help="Print JSON")
    fund_parser.set_defaults(func=cmd_fund)

    categories_parser = subparsers.add_parser("categories", help="List page categories")
    categories_parser.add_argument("--page", choices=sorted(PAGE_PRESETS))
    categories_parser.set_defaults(func=cmd_categories)

    list_parser = subparsers.add_parser("list", help="Watchlist / compare / overlap lists")
    list_parser.add_argument("action", choices=["show", "add", "remove", "clear"])
    list_parser.add_argument("name", nargs="?", choices=list(LIST_NAMES))
    list_parser.add_argument("fund_ids", nargs="*")
    list_parser.set_defaults(func=cmd_list)

    overlap_parser = subparsers.add_parser("overlap", help="Holdings overlap of 2-5 funds")
    overlap_parser.add_argument("file", nargs="?", help="JSON file of funds with holdings")
    overlap_parser.add_argument("--json", action="store_true", help="Print JSON")
    overlap_parser.set_defaults(func=cmd_overlap)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = load_settings()
    configure_logging(settings.log_level, json_format=settings.log_json, log_file=settings.log_file)

    try:
        args.func(args, settings)
    except FundEngineError as exc:
        print(f"Error: {exc.user_message}", file=sys.stderr)
        sys.exit(1)
    except (FundPipelineError, ListStoreError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
