"""Normalise heterogeneous financial data and emit interactive chart documents."""
from .chart import generate_chart
from .config import CHART_TYPES, ChartOptions, SnapshotConfig
from .document import build_chart_data, build_chart_options, build_document
from .errors import ArtifactWriteError, ChartError, InvalidInputError, ViewerLaunchError
from .metadata import format_value, summarize
from .processing import (
    format_date_label,
    latest_period,
    metrics_to_observations,
    normalize,
    prices_to_observations,
)
from .types import Observation

__all__ = [
    "CHART_TYPES",
    "ChartOptions",
    "SnapshotConfig",
    "Observation",
    "ChartError",
    "InvalidInputError",
    "ArtifactWriteError",
    "ViewerLaunchError",
    "normalize",
    "latest_period",
    "format_date_label",
    "prices_to_observations",
    "metrics_to_observations",
    "summarize",
    "format_value",
    "build_chart_data",
    "build_chart_options",
    "build_document",
    "generate_chart",
]
