"""Shape detection and normalisation of raw chart input into observations."""
from __future__ import annotations

import datetime as dt
import logging
import math
import numbers
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

from .config import OHLC_FIELDS, VALUE_FIELDS
from .data import frame_to_records
from .errors import InvalidInputError
from .types import Observation

logger = logging.getLogger(__name__)

Extractor = Callable[[Mapping], Any]
PeriodStrategy = Callable[[Mapping], Optional[Mapping]]

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
# Fields missing from a partial date string are filled from this value.
_DATE_DEFAULT = dt.datetime(2000, 1, 1)


def _to_number(raw: Any) -> Optional[float]:
    """Coerce numbers and numeric strings to a finite float, else ``None``."""

    if isinstance(raw, bool):
        return None
    if isinstance(raw, numbers.Real):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _date_text(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (dt.date, dt.datetime)):
        return raw.isoformat()
    return None


def _period_part(raw: Any) -> Optional[str]:
    if isinstance(raw, bool) or not isinstance(raw, numbers.Real):
        return None
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def format_date_label(text: str) -> str:
    """Render a date-like string as ``"Jan 15"``.

    Strings that cannot be parsed fall back to their first ten characters, so
    the function never raises for string input.
    """

    text = str(text)
    try:
        parsed = date_parser.parse(text, default=_DATE_DEFAULT)
    except (ValueError, OverflowError):
        return text[:10]
    return f"{_MONTHS[parsed.month - 1]} {parsed.day}"


def _numeric_field(name: str) -> Extractor:
    def extract(row: Mapping) -> Optional[float]:
        return _to_number(row.get(name))

    return extract


def _explicit_label(row: Mapping) -> Optional[str]:
    label = row.get("label")
    return label if isinstance(label, str) else None


def _formatted_date(name: str) -> Extractor:
    def extract(row: Mapping) -> Optional[str]:
        text = _date_text(row.get(name))
        return format_date_label(text) if text is not None else None

    return extract


def _quarter_label(year_field: str) -> Extractor:
    def extract(row: Mapping) -> Optional[str]:
        year = _period_part(row.get(year_field))
        quarter = _period_part(row.get("quarter"))
        if year is None or quarter is None:
            return None
        return f"Q{quarter} {year}"

    return extract


def _year_label(year_field: str) -> Extractor:
    def extract(row: Mapping) -> Optional[str]:
        return _period_part(row.get(year_field))

    return extract


VALUE_CHAIN: Tuple[Extractor, ...] = tuple(_numeric_field(name) for name in VALUE_FIELDS)
PERIOD_LABEL_CHAIN: Tuple[Extractor, ...] = (
    _quarter_label("fiscal_year"),
    _quarter_label("year"),
    _year_label("fiscal_year"),
    _year_label("year"),
)
LABEL_CHAIN: Tuple[Extractor, ...] = (
    _explicit_label,
    _formatted_date("report_period"),
    _formatted_date("date"),
) + PERIOD_LABEL_CHAIN


def _first_match(chain: Sequence[Extractor], row: Mapping) -> Any:
    """Evaluate extractors in order and return the first non-``None`` result."""

    for extract in chain:
        result = extract(row)
        if result is not None:
            return result
    return None


def _ohlc_fields(row: Mapping) -> dict:
    return {name: _to_number(row.get(name)) for name in OHLC_FIELDS}


def latest_period(periods: Mapping) -> Optional[Mapping]:
    """Pick the last period of a nested time series as the snapshot to chart."""

    if not periods:
        return None
    latest = list(periods.values())[-1]
    return latest if isinstance(latest, Mapping) else None


def _flatten_mapping(mapping: Mapping) -> List[Observation]:
    observations = []
    for key, raw in mapping.items():
        number = _to_number(raw)
        if number is not None:
            observations.append(Observation(value=number, label=str(key)))
    return observations


def _from_mapping(mapping: Mapping, period_strategy: PeriodStrategy) -> List[Observation]:
    if not mapping:
        return []

    # The first entry alone decides between a flat map and nested periods.
    first = next(iter(mapping.values()))
    if _to_number(first) is not None:
        observations = _flatten_mapping(mapping)
        if observations:
            return observations

    if isinstance(first, Mapping):
        segments = period_strategy(mapping)
        if segments is not None:
            return _flatten_mapping(segments)

    return []


def _from_record(row: Mapping) -> Optional[Observation]:
    value = _first_match(VALUE_CHAIN, row)
    if value is None:
        return None

    date = _date_text(row.get("date"))
    if date is None:
        date = _date_text(row.get("report_period"))

    return Observation(
        value=value,
        label=_first_match(LABEL_CHAIN, row),
        date=date,
        **_ohlc_fields(row),
    )


def _from_sequence(items: Sequence[Any]) -> List[Observation]:
    observations = []
    for index, item in enumerate(items):
        if isinstance(item, Mapping):
            observation = _from_record(item)
            if observation is not None:
                observations.append(observation)
            continue

        number = _to_number(item)
        if number is not None:
            observations.append(Observation(value=number, label=f"Point {index + 1}"))
    return observations


def _coerce_container(raw_data: Any) -> Any:
    """Translate pandas and numpy containers into plain mappings or lists."""

    if isinstance(raw_data, pd.DataFrame):
        return frame_to_records(raw_data)
    if isinstance(raw_data, pd.Series):
        return {str(key): value for key, value in raw_data.items()}
    if isinstance(raw_data, np.ndarray):
        return raw_data.tolist()
    return raw_data


def normalize(raw_data: Any, period_strategy: PeriodStrategy = latest_period) -> List[Observation]:
    """Derive an ordered list of observations from loosely typed input.

    Recognised shapes, tried in order: a flat ``{label: number}`` mapping, a
    nested ``{period: {label: number}}`` mapping (only the period chosen by
    ``period_strategy`` is kept), and a list of numbers, numeric strings or
    records. Raises :class:`InvalidInputError` when nothing usable is found.
    """

    if raw_data is None:
        raise InvalidInputError("data required")

    raw_data = _coerce_container(raw_data)
    observations: List[Observation] = []

    if isinstance(raw_data, Mapping):
        observations = _from_mapping(raw_data, period_strategy)

    if not observations and isinstance(raw_data, (list, tuple)):
        observations = _from_sequence(raw_data)

    if not observations:
        raise InvalidInputError("no valid numeric data found")

    logger.debug("Normalised input into %d observation(s).", len(observations))
    return observations


def prices_to_observations(prices: Any, value_field: str = "close") -> List[Observation]:
    """Convert price bars into observations labelled by their date."""

    if not isinstance(prices, (list, tuple)):
        return []

    observations = []
    for row in prices:
        if not isinstance(row, Mapping):
            continue
        value = _to_number(row.get(value_field))
        if value is None:
            continue
        date = _date_text(row.get("date")) or _date_text(row.get("timestamp"))
        observations.append(
            Observation(
                value=value,
                label=format_date_label(date) if date else None,
                date=date or None,
                **_ohlc_fields(row),
            )
        )
    return observations


def metrics_to_observations(metrics: Any, metric_field: str) -> List[Observation]:
    """Convert fundamentals rows into observations for a single metric."""

    if not isinstance(metrics, (list, tuple)):
        return []

    observations = []
    for row in metrics:
        if not isinstance(row, Mapping):
            continue
        value = _to_number(row.get(metric_field))
        if value is None:
            continue
        date = _date_text(row.get("report_period")) or _date_text(row.get("date"))
        if date:
            label = format_date_label(date)
        else:
            label = _first_match(PERIOD_LABEL_CHAIN, row)
        observations.append(Observation(value=value, label=label, date=date or None))
    return observations
