"""Build the standalone interactive HTML document for a normalised series.

The document embeds the observation data directly and draws it with Chart.js
loaded from a CDN, so it can be opened from disk without a server.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, select_autoescape

from .config import ChartOptions
from .metadata import format_value, summarize
from .types import Observation

CHART_JS_URL = "https://cdn.jsdelivr.net/npm/chart.js@4.4.0/dist/chart.umd.min.js"

PALETTE = [
    "rgba(54, 162, 235, 0.6)",
    "rgba(255, 99, 132, 0.6)",
    "rgba(75, 192, 192, 0.6)",
    "rgba(255, 206, 86, 0.6)",
    "rgba(153, 102, 255, 0.6)",
    "rgba(255, 159, 64, 0.6)",
]
PRIMARY = "rgba(54, 162, 235, 1)"
TEXT_COLOR = "#e0e0e0"
TICK_COLOR = "#a0a0a0"
GRID_COLOR = "rgba(255, 255, 255, 0.1)"

# Candlestick fallbacks derived from ``value`` when a price field is missing.
_CANDLE_SERIES = (
    ("High", "high", 1.01, "rgba(75, 192, 192, 0.3)", "rgba(75, 192, 192, 1)"),
    ("Open", "open", 0.99, "rgba(54, 162, 235, 0.5)", "rgba(54, 162, 235, 1)"),
    ("Close", "close", 1.0, "rgba(255, 206, 86, 0.5)", "rgba(255, 206, 86, 1)"),
    ("Low", "low", 0.98, "rgba(255, 99, 132, 0.3)", "rgba(255, 99, 132, 1)"),
)

_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <script src="{{ chart_js_url }}"></script>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 20px; background: #1e1e1e; color: #e0e0e0; }
        .container { max-width: 1200px; margin: 0 auto; background: #2d2d2d; padding: 30px; border-radius: 8px; box-shadow: 0 4px 6px rgba(0, 0, 0, 0.3); }
        h1 { margin: 0 0 20px 0; color: #58a6ff; font-size: 24px; }
        .chart-container { position: relative; height: 400px; margin: 20px 0; }
        .info { margin-top: 20px; padding: 15px; background: #3d3d3d; border-radius: 4px; font-size: 14px; }
        .info-item { margin: 5px 0; }
    </style>
</head>
<body>
    <div class="container">
        <h1>{{ title }}</h1>
        <div class="chart-container"><canvas id="chart"></canvas></div>
        <div class="info">
            <div class="info-item"><strong>Chart Type:</strong> {{ chart_type }}</div>
            <div class="info-item"><strong>Data Points:</strong> {{ data_points }}</div>
            {%- if summary %}
            <div class="info-item"><strong>Min:</strong> {{ summary.min }}</div>
            <div class="info-item"><strong>Max:</strong> {{ summary.max }}</div>
            <div class="info-item"><strong>Average:</strong> {{ summary.mean }}</div>
            {%- endif %}
        </div>
    </div>
    <script>
        function formatValue(value) {
            if (value >= 1e12) return '$' + (value / 1e12).toFixed(2) + 'T';
            if (value >= 1e9) return '$' + (value / 1e9).toFixed(2) + 'B';
            if (value >= 1e6) return '$' + (value / 1e6).toFixed(2) + 'M';
            if (value >= 1e3) return '$' + (value / 1e3).toFixed(2) + 'K';
            return '$' + Number(value).toFixed(2);
        }
        const chartData = {{ chart_data|tojson }};
        const chartOptions = {{ chart_options|tojson }};
        if (chartOptions.scales && chartOptions.scales.y) {
            chartOptions.scales.y.ticks.callback = formatValue;
        }
        chartOptions.plugins.tooltip.callbacks = {
            label: function(context) {
                const parsed = context.parsed;
                const val = (parsed !== null && typeof parsed === 'object') ? parsed.y : parsed;
                return context.dataset.label + ': ' + formatValue(val);
            }
        };
        new Chart(document.getElementById('chart').getContext('2d'), {
            type: {{ js_chart_type|tojson }},
            data: chartData,
            options: chartOptions
        });
    </script>
</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default_for_string=True))
_DOCUMENT = _env.from_string(_TEMPLATE)

# Chart.js has no native area or candlestick type.
_JS_CHART_TYPES = {"area": "line", "candlestick": "bar"}


def _candlestick_data(observations: Sequence[Observation], labels: List[str]) -> Dict[str, Any]:
    datasets = []
    for name, field, factor, background, border in _CANDLE_SERIES:
        points = []
        for obs in observations:
            price = getattr(obs, field)
            points.append(price if price is not None else obs.value * factor)
        datasets.append(
            {"label": name, "data": points, "backgroundColor": background, "borderColor": border}
        )
    return {"labels": labels, "datasets": datasets}


def build_chart_data(observations: Sequence[Observation], options: ChartOptions) -> Dict[str, Any]:
    """Build the Chart.js ``data`` block for the requested chart kind."""

    labels = [obs.label or obs.date or "" for obs in observations]
    values = [obs.value for obs in observations]
    chart_type = options.chart_type

    if chart_type == "candlestick":
        return _candlestick_data(observations, labels)

    if options.is_proportion:
        colors = [PALETTE[i % len(PALETTE)] for i in range(len(values))]
        return {
            "labels": labels,
            "datasets": [
                {
                    "label": options.y_label,
                    "data": values,
                    "backgroundColor": colors,
                    "borderColor": [color.replace("0.6", "1") for color in colors],
                    "borderWidth": 2,
                }
            ],
        }

    if chart_type == "radar":
        return {
            "labels": labels,
            "datasets": [
                {
                    "label": options.y_label,
                    "data": values,
                    "backgroundColor": "rgba(54, 162, 235, 0.2)",
                    "borderColor": PRIMARY,
                    "borderWidth": 2,
                    "pointBackgroundColor": PRIMARY,
                    "pointBorderColor": "#fff",
                    "pointHoverBackgroundColor": "#fff",
                    "pointHoverBorderColor": PRIMARY,
                }
            ],
        }

    if chart_type == "scatter":
        return {
            "datasets": [
                {
                    "label": options.y_label,
                    "data": [{"x": i, "y": v} for i, v in enumerate(values)],
                    "backgroundColor": "rgba(54, 162, 235, 0.6)",
                    "borderColor": PRIMARY,
                    "borderWidth": 2,
                }
            ]
        }

    background = {
        "bar": "rgba(54, 162, 235, 0.6)",
        "area": "rgba(54, 162, 235, 0.3)",
    }.get(chart_type, "rgba(54, 162, 235, 0.2)")
    smooth = chart_type in ("line", "area")
    return {
        "labels": labels,
        "datasets": [
            {
                "label": options.y_label,
                "data": values,
                "backgroundColor": background,
                "borderColor": PRIMARY,
                "borderWidth": 2,
                "fill": smooth,
                "tension": 0.4 if smooth else 0,
            }
        ],
    }


def _axis(label: str, **extra: Any) -> Dict[str, Any]:
    axis = {
        "title": {"display": True, "text": label, "color": TICK_COLOR},
        "ticks": {"color": TICK_COLOR},
        "grid": {"color": GRID_COLOR},
    }
    axis.update(extra)
    return axis


def build_chart_options(options: ChartOptions) -> Dict[str, Any]:
    """Build the Chart.js ``options`` block (dark theme)."""

    chart_options: Dict[str, Any] = {
        "responsive": True,
        "maintainAspectRatio": False,
        "plugins": {
            "legend": {"display": True, "labels": {"color": TEXT_COLOR}},
            "tooltip": {
                "backgroundColor": "rgba(0, 0, 0, 0.8)",
                "titleColor": TEXT_COLOR,
                "bodyColor": TEXT_COLOR,
                "borderColor": "#58a6ff",
                "borderWidth": 1,
            },
            "title": {
                "display": bool(options.title),
                "text": options.title or "",
                "color": TEXT_COLOR,
                "font": {"size": 18},
            },
        },
    }

    if options.is_proportion or options.chart_type == "radar":
        return chart_options

    if options.chart_type == "scatter":
        x_axis = _axis(options.x_label, type="linear", position="bottom")
    else:
        x_axis = _axis(options.x_label)
    chart_options["scales"] = {"x": x_axis, "y": _axis(options.y_label)}
    return chart_options


def build_document(
    observations: Sequence[Observation],
    options: ChartOptions,
    summary: Optional[Dict[str, float]] = None,
) -> str:
    """Render the complete HTML document for the observations.

    ``summary`` is computed from the observations when not supplied.
    """

    if summary is None and not options.is_proportion:
        summary = summarize(observations, options.chart_type)
    display_summary: Optional[Dict[str, str]] = None
    if summary is not None:
        display_summary = {key: format_value(summary[key]) for key in ("min", "max", "mean")}

    return _DOCUMENT.render(
        title=options.display_title,
        chart_js_url=CHART_JS_URL,
        chart_type=options.chart_type,
        js_chart_type=_JS_CHART_TYPES.get(options.chart_type, options.chart_type),
        data_points=len(observations),
        summary=display_summary,
        chart_data=build_chart_data(observations, options),
        chart_options=build_chart_options(options),
    )
