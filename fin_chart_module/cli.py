"""Command line interface for generating interactive financial charts.

Example usage
-------------

* Chart a JSON file of records or a ``{segment: value}`` breakdown::

    python make_chart.py --input revenue.json --type pie --title "Revenue by segment"

* Chart one metric from a list of fundamentals rows::

    python make_chart.py --input income.json --metric_field net_income --type bar

* Candlestick of daily prices downloaded from Yahoo Finance::

    python make_chart.py --ticker AAPL --start 2024-01-01 --end 2024-03-31 --type candlestick --no_open
"""
from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import sys
from typing import Any, List, Optional

from .config import CHART_TYPES, DEFAULT_CHART_TYPE, DEFAULT_OUT_DIR
from .chart import generate_chart
from .data import fetch_ohlcv, frame_to_records
from .processing import metrics_to_observations, prices_to_observations


LOGGER_NAME = "make_chart"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(description="Generate an interactive HTML chart.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="JSON file with the chart data ('-' reads stdin).")
    source.add_argument("--ticker", help="Ticker symbol to download from Yahoo Finance (e.g. AAPL).")
    parser.add_argument("--start", help="Start date for --ticker (YYYY-MM-DD, inclusive).")
    parser.add_argument("--end", help="End date for --ticker (YYYY-MM-DD).")
    parser.add_argument(
        "--interval",
        default="1d",
        help="Sampling interval supported by Yahoo Finance (e.g. 1d, 1h, 5m).",
    )
    parser.add_argument(
        "--value_field",
        default="close",
        help="Price field plotted as the value for --ticker data.",
    )
    parser.add_argument(
        "--metric_field",
        help="Plot this field of each input record (fundamentals rows).",
    )
    parser.add_argument("--type", choices=CHART_TYPES, default=DEFAULT_CHART_TYPE, help="Chart kind.")
    parser.add_argument("--title", help="Chart title.")
    parser.add_argument("--x_label", help="X axis label (default: Period).")
    parser.add_argument("--y_label", help="Y axis label (default: Value).")
    parser.add_argument("--out_dir", default=DEFAULT_OUT_DIR, help="Output directory.")
    parser.add_argument("--filename", help="Output file name (default: derived from the title).")
    parser.add_argument("--no_open", action="store_true", help="Do not open the chart in a browser.")
    parser.add_argument(
        "--snapshot",
        action="store_true",
        help="Also write a static PNG snapshot next to the HTML document.",
    )
    return parser.parse_args(argv)


def _load_json(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _load_ticker(args: argparse.Namespace, logger: logging.Logger) -> Any:
    if not args.start or not args.end:
        raise SystemExit("--start and --end are required with --ticker.")
    try:
        start_dt = dt.datetime.fromisoformat(args.start)
        end_dt = dt.datetime.fromisoformat(args.end)
    except ValueError as exc:
        raise SystemExit(f"Invalid date provided: {exc}")
    if end_dt < start_dt:
        raise SystemExit("End date must be greater than or equal to start date.")

    logger.info(
        "Fetching data for %s from %s to %s at interval %s",
        args.ticker,
        args.start,
        args.end,
        args.interval,
    )
    try:
        df = fetch_ohlcv(args.ticker, args.start, args.end, args.interval)
    except (RuntimeError, ValueError) as exc:
        raise SystemExit(f"Could not load {args.ticker}: {exc}")
    logger.info("Downloaded %d rows of data.", len(df))
    observations = prices_to_observations(frame_to_records(df), value_field=args.value_field)
    return [obs.to_dict() for obs in observations]


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI utility."""

    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    logger = logging.getLogger(LOGGER_NAME)

    if args.ticker:
        data = _load_ticker(args, logger)
    else:
        try:
            data = _load_json(args.input)
        except (OSError, ValueError) as exc:
            raise SystemExit(f"Could not read {args.input}: {exc}")
        if args.metric_field:
            observations = metrics_to_observations(data, args.metric_field)
            data = [obs.to_dict() for obs in observations]

    result = generate_chart(
        data,
        title=args.title or (args.ticker and f"{args.ticker} {args.value_field}"),
        chart_type=args.type,
        x_label=args.x_label,
        y_label=args.y_label,
        out_dir=args.out_dir,
        filename=args.filename,
        open_browser=not args.no_open,
        snapshot=args.snapshot,
    )
    print(json.dumps(result, indent=2))
    return 0 if result["success"] else 1
