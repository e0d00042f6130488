"""
Wealth Analysis CLI Entry Point
===============================
Load a profile, run the analysis, print the report and optionally export it.

Usage:
    wealth-analyze --config profile.yaml
    wealth-analyze --config profile.json --export ./output --zip
    WEALTH_PROFILE_PATH=profile.yaml wealth-analyze --json
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from wealth_engine import __version__
from wealth_engine.analytics.valuation import net_worth_in
from wealth_engine.config.loader import load_profile
from wealth_engine.core.pipeline import analyze_portfolio
from wealth_engine.data.loader import read_assets_csv
from wealth_engine.reporting.console import print_report
from wealth_engine.reporting.export import export_report, report_payload
from wealth_engine.utils.exceptions import WealthEngineError
from wealth_engine.utils.logger import set_console_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wealth-analyze",
        description="Analyse a multi-currency portfolio: valuation, risks, quality score and rebalancing",
    )
    parser.add_argument("--config", default=None,
                        help="Path to JSON/YAML profile (default: $WEALTH_PROFILE_PATH)")
    parser.add_argument("--assets-csv", default=None,
                        help="Read assets from a CSV instead of the profile's asset list")
    parser.add_argument("--export", metavar="DIR", default=None,
                        help="Write JSON + CSV exports into DIR")
    parser.add_argument("--zip", action="store_true", help="Bundle exports into one ZIP archive")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON instead of text")
    parser.add_argument("--net-worth-in", metavar="CUR", default=None,
                        help="Also show net worth converted to currency CUR")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for INFO logs, -vv for DEBUG")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_console_level(logging.DEBUG if args.verbose > 1 else logging.INFO)

    config_path = args.config or os.environ.get("WEALTH_PROFILE_PATH")
    if not config_path:
        print("error: no profile given (use --config or set WEALTH_PROFILE_PATH)", file=sys.stderr)
        return 2

    try:
        profile = load_profile(config_path)
        assets = read_assets_csv(args.assets_csv) if args.assets_csv else profile.assets
        report = analyze_portfolio(assets, profile.liabilities, profile.settings)

        if args.json:
            print(json.dumps(report_payload(report), indent=2))
        else:
            print_report(report)

        if args.net_worth_in and not args.json:
            amount = net_worth_in(report.totals, args.net_worth_in, profile.settings)
            print(f"\nNet worth in {args.net_worth_in.upper()}: {amount:,.2f}")

        if args.export:
            files = export_report(report, args.export, create_zip=args.zip)
            if not args.json:
                print(f"\nExported {len(files)} file(s) to {args.export}")
    except WealthEngineError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
