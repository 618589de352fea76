#!/usr/bin/env python3
"""
Summarize a CSV export of the Tombo `reports` table.

Runs the dashboard aggregations offline, without Supabase, and prints the
summary and chart series as JSON.

Usage:
    python scripts/summarize_export.py reports_rows.csv --type theft --from 2024-01-01
"""

import argparse
import csv
import json
import sys
from datetime import date
from pathlib import Path

from tombo.config import get_dashboard_tz
from tombo.schemas.report import ALL_TYPES, FilterCriteria, TableCounts
from tombo.services.aggregator import apply_filters, build_charts, build_summary, distinct_types
from tombo.services.loader import parse_report_rows


def log(msg):
    """Print to stderr with flush for immediate output."""
    print(msg, file=sys.stderr, flush=True)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("csv_path", type=Path, help="CSV export of the reports table")
    parser.add_argument("--type", dest="report_type", default=ALL_TYPES, help="Report type, or 'all'")
    parser.add_argument("--from", dest="date_from", type=date.fromisoformat, default=None)
    parser.add_argument("--to", dest="date_to", type=date.fromisoformat, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if not args.csv_path.exists():
        log(f"File not found: {args.csv_path}")
        return 1

    with args.csv_path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    log(f"Read {len(rows)} rows from {args.csv_path}")

    records = parse_report_rows(rows)
    criteria = FilterCriteria(
        report_type=args.report_type,
        date_from=args.date_from,
        date_to=args.date_to,
    )
    tz = get_dashboard_tz()
    filtered = apply_filters(records, criteria, tz)
    log(f"{len(filtered)} of {len(records)} reports match the filters")

    output = {
        "filters": criteria.model_dump(mode="json"),
        "summary": build_summary(filtered, TableCounts(reports=len(records))).model_dump(mode="json"),
        "charts": build_charts(filtered, tz).model_dump(mode="json"),
        "report_types": sorted(distinct_types(records)),
    }
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
