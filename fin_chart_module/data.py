"""Data acquisition helpers that feed price history into the normaliser."""
from __future__ import annotations

from typing import Dict, List

import pandas as pd
import yfinance as yf

PRICE_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]


def fetch_ohlcv(ticker: str, start: str, end: str, interval: str) -> pd.DataFrame:
    """Fetch OHLCV data from Yahoo Finance and normalise the index."""

    try:
        df = yf.download(
            ticker,
            start=start,
            end=end,
            interval=interval,
            auto_adjust=True,
            prepost=False,
            progress=False,
        )
    except Exception as exc:  # pragma: no cover - network path
        raise RuntimeError(f"Failed to download data for {ticker!r}: {exc}") from exc

    # Flatten MultiIndex columns (yfinance wraps cols for multi-ticker support)
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    if df.empty:
        raise ValueError(f"No data returned for ticker {ticker!r} in the specified range.")

    missing_cols = [col for col in PRICE_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Downloaded data missing required columns: {missing_cols}")

    df = df.loc[:, PRICE_COLUMNS].copy()
    if isinstance(df.index, pd.DatetimeIndex) and df.index.tz is not None:
        df.index = df.index.tz_localize(None)
    df = df[~df.index.duplicated(keep="first")]
    return df.sort_index()


def frame_to_records(df: pd.DataFrame) -> List[Dict[str, object]]:
    """Convert a dataframe into plain records with lower-case column names.

    A ``DatetimeIndex`` is written to each record's ``date`` field as ISO text;
    any other index is dropped. Missing cells are left out of the record.
    """

    frame = df.copy()
    frame.columns = [str(col).lower() for col in frame.columns]
    dates = None
    if isinstance(frame.index, pd.DatetimeIndex):
        dates = [ts.isoformat() for ts in frame.index]

    records: List[Dict[str, object]] = []
    for position, row in enumerate(frame.to_dict(orient="records")):
        record = {
            key: value
            for key, value in row.items()
            if not (pd.api.types.is_scalar(value) and pd.isna(value))
        }
        if dates is not None and "date" not in record:
            record["date"] = dates[position]
        records.append(record)
    return records
