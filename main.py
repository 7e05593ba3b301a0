#!/usr/bin/env python3
"""
CLI for valuing a collection from a JSON payload.

Usage:
    python main.py valuate <payload_json> [options]

Examples:
    # Value in the configured display currency
    python main.py valuate collection.json

    # Value in EUR, assuming Very Good for items without a condition
    python main.py valuate collection.json --currency EUR --condition very-good

    # Weight American sales higher and print the full result as JSON
    python main.py valuate collection.json --region americas --json

The payload has the same shape as the POST /api/valuation body:
{"rates": {"base": "USD", "date": "...", "rates": {...}}, "items": [...]}
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from core.collection import CollectionSummary
from core.valuation_engine import ValuationError
from utils.config import Config
from utils.formatting import format_currency, format_percent, format_signed_currency
from web.schemas import ValuationRequest, build_items, build_valuer


def print_summary(summary: CollectionSummary) -> None:
    """Print per-item lines and collection totals."""
    currency = summary.display_currency

    for valuation in summary.items:
        flag = "  (no value)" if valuation.result.unvaluable else ""
        print(
            f"{valuation.item.name}: "
            f"paid {format_currency(valuation.purchase_display, currency)}, "
            f"estimated {format_currency(valuation.estimate_display, currency)} "
            f"[{valuation.result.source}]{flag}"
        )

    print()
    print(f"  Items with market data: {summary.market_count}")
    print(f"  Items with fallback:    {summary.fallback_count}")
    print(f"  Total items:            {len(summary.items)}")

    print()
    print("Collection Value Summary:")
    print(f"  Total purchase price:   {format_currency(summary.total_purchase, currency)}")
    print(f"  Total estimated value:  {format_currency(summary.total_estimate, currency)}")
    print(
        f"  Difference:             {format_signed_currency(summary.difference, currency)} "
        f"({format_percent(summary.percent_change)})"
    )

    if summary.diagnostics.missing_rates:
        print(f"\nMissing exchange rates: {', '.join(summary.diagnostics.missing_rates)}")
    if summary.diagnostics.unrecognized_formats:
        print("\nUnrecognized formats:")
        for text in summary.diagnostics.unrecognized_formats:
            print(f'  "{text}"')


def cmd_valuate(args, config: Config) -> int:
    """Value a collection payload."""
    path = Path(args.payload)
    if not path.exists():
        print(f"Error: payload not found at {path}", file=sys.stderr)
        return 1

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"Error: invalid JSON in {path}: {exc}", file=sys.stderr)
        return 1
    if not isinstance(data, dict):
        print(f"Error: payload in {path} must be a JSON object", file=sys.stderr)
        return 1

    if args.currency:
        data["display_currency"] = args.currency
    if args.condition:
        data["condition"] = args.condition
    if args.region:
        data["region"] = args.region
    if args.workers:
        data["workers"] = args.workers

    try:
        request = ValuationRequest.model_validate(data)
        valuer = build_valuer(request, config)
    except (ValidationError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    items, diagnostics = build_items(request)
    try:
        summary = valuer.value_collection(items, diagnostics)
    except ValuationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary(summary)
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Collection valuation from marketplace sale history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    valuate_parser = subparsers.add_parser("valuate", help="Value a collection payload")
    valuate_parser.add_argument("payload", help="Path to JSON payload")
    valuate_parser.add_argument("-C", "--currency", help="Display currency (ISO 4217 code)")
    valuate_parser.add_argument(
        "-c", "--condition",
        help="Default condition (new, like-new, very-good, good, acceptable)",
    )
    valuate_parser.add_argument(
        "-r", "--region",
        help="Region for currency weighting (europe, americas, asia, india, oceania)",
    )
    valuate_parser.add_argument("-w", "--workers", type=int, help="Worker threads")
    valuate_parser.add_argument("--json", action="store_true", help="Print JSON output")

    args = parser.parse_args(argv)

    config = Config.load()
    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "valuate":
        return cmd_valuate(args, config)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
