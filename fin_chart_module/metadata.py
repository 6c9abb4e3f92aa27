"""Summary statistics and value formatting for chart documents."""
from __future__ import annotations

from typing import Dict, Optional, Sequence

import pandas as pd

from .config import PROPORTION_TYPES
from .errors import InvalidInputError
from .types import Observation

_VALUE_SUFFIXES = ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"))


def format_value(value: float) -> str:
    """Format a monetary value with a magnitude suffix, e.g. ``$1.23B``."""

    for threshold, suffix in _VALUE_SUFFIXES:
        if value >= threshold:
            return f"${value / threshold:.2f}{suffix}"
    return f"${value:.2f}"


def summarize(observations: Sequence[Observation], chart_type: str) -> Optional[Dict[str, float]]:
    """Compute min, max and mean of the observation values.

    Proportion charts (pie, doughnut) return ``None`` since the figures carry
    no meaning there.
    """

    if not observations:
        raise InvalidInputError("no valid numeric data found")
    if chart_type in PROPORTION_TYPES:
        return None

    series = pd.Series([obs.value for obs in observations], dtype="float64")
    return {
        "min": float(series.min()),
        "max": float(series.max()),
        "mean": float(series.mean()),
        "count": int(series.size),
    }
