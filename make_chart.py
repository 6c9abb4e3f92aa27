#!/usr/bin/env python3
"""make_chart.py
=================================

Entry-point script for turning loosely structured financial data (number
lists, ``{segment: value}`` breakdowns, statement rows, price bars) into a
standalone interactive HTML chart. The heavy lifting lives in the
``fin_chart_module`` package.

Example usage
-------------

* Segment breakdown as a doughnut chart::

    python make_chart.py --input segments.json --type doughnut --title "Revenue mix"

* Daily closes for a ticker::

    python make_chart.py --ticker MSFT --start 2024-01-01 --end 2024-06-30 --no_open --snapshot

The script requires the following packages: ``jinja2``, ``pandas``, ``numpy``,
``python-dateutil``, ``yfinance``, ``matplotlib``, ``mplfinance`` and
``pillow``.
"""
from __future__ import annotations

import sys

from fin_chart_module.cli import main


if __name__ == "__main__":
    sys.exit(main())
