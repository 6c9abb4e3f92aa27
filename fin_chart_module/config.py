"""Configuration objects and shared constants for chart generation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional, Tuple

from .errors import InvalidInputError

CHART_TYPES: Final[Tuple[str, ...]] = (
    "line",
    "bar",
    "area",
    "scatter",
    "pie",
    "doughnut",
    "radar",
    "candlestick",
)
PROPORTION_TYPES: Final[Tuple[str, ...]] = ("pie", "doughnut")

# Fallback chain for the observation value, highest priority first.
VALUE_FIELDS: Final[Tuple[str, ...]] = (
    "value",
    "net_income",
    "total_revenue",
    "revenue",
    "close",
)
OHLC_FIELDS: Final[Tuple[str, ...]] = ("open", "high", "low", "close")

DEFAULT_TITLE: Final[str] = "Financial Chart"
DEFAULT_CHART_TYPE: Final[str] = "line"
DEFAULT_X_LABEL: Final[str] = "Period"
DEFAULT_Y_LABEL: Final[str] = "Value"
DEFAULT_OUT_DIR: Final[str] = "./out/charts"


@dataclass(frozen=True)
class ChartOptions:
    """Display configuration passed through to the document renderer."""

    title: Optional[str] = None
    chart_type: str = DEFAULT_CHART_TYPE
    x_label: str = DEFAULT_X_LABEL
    y_label: str = DEFAULT_Y_LABEL

    def __post_init__(self) -> None:
        if self.chart_type not in CHART_TYPES:
            raise InvalidInputError(
                f"Unsupported chart type {self.chart_type!r}; expected one of {', '.join(CHART_TYPES)}"
            )

    @property
    def display_title(self) -> str:
        return self.title or DEFAULT_TITLE

    @property
    def is_proportion(self) -> bool:
        return self.chart_type in PROPORTION_TYPES

    @classmethod
    def create(
        cls,
        title: Optional[str] = None,
        chart_type: Optional[str] = None,
        x_label: Optional[str] = None,
        y_label: Optional[str] = None,
    ) -> "ChartOptions":
        """Build options, substituting defaults for missing or empty values."""

        return cls(
            title=title or None,
            chart_type=chart_type or DEFAULT_CHART_TYPE,
            x_label=x_label or DEFAULT_X_LABEL,
            y_label=y_label or DEFAULT_Y_LABEL,
        )


@dataclass(frozen=True)
class SnapshotConfig:
    """Container for static snapshot rendering configuration."""

    bg: str = "#1e1e1e"
    line_color: str = "#36a2eb"
    up_color: str = "#4bc0c0"
    down_color: str = "#ff6384"
    line_width: float = 1.5
    img_size: int = 512
    dpi: int = 128
    tight_layout_pad: float = 0.1
