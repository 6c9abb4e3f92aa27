"""Canonical observation record produced by the normaliser."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class Observation:
    """One normalised data point.

    Attributes
    ----------
    value : float
        Finite magnitude plotted on the value axis.
    label : str | None
        Human readable x-axis tick, not necessarily unique.
    date : str | None
        Original date or period string, kept verbatim.
    open, high, low, close : float | None
        Price fields for candlestick rendering; independent of ``value``.
    """

    value: float
    label: Optional[str] = None
    date: Optional[str] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None

    @property
    def has_ohlc(self) -> bool:
        return None not in (self.open, self.high, self.low, self.close)

    def to_dict(self) -> Dict[str, Union[float, str]]:
        """Return the populated fields only; ``value`` is always present."""

        row: Dict[str, Union[float, str]] = {"value": self.value}
        for key in ("label", "date", "open", "high", "low", "close"):
            field_value = getattr(self, key)
            if field_value is not None:
                row[key] = field_value
        return row
