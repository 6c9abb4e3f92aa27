import numpy as np
import pandas as pd

from fin_chart_module.data import frame_to_records
from fin_chart_module.processing import metrics_to_observations, prices_to_observations


def make_price_df():
    index = pd.date_range("2023-01-02", periods=3, freq="D")
    data = {
        "Open": [1.0, 1.1, 1.2],
        "High": [1.2, 1.3, 1.4],
        "Low": [0.9, 1.0, np.nan],
        "Close": [1.05, 1.15, 1.25],
        "Volume": [1000, 1100, 1200],
    }
    return pd.DataFrame(data, index=index)


def test_frame_to_records_lowercases_columns_and_writes_dates():
    records = frame_to_records(make_price_df())
    assert len(records) == 3
    assert records[0]["close"] == 1.05
    assert records[0]["date"] == "2023-01-02T00:00:00"
    assert set(records[0]) == {"open", "high", "low", "close", "volume", "date"}


def test_frame_to_records_drops_missing_cells():
    records = frame_to_records(make_price_df())
    assert "low" not in records[2]


def test_frame_to_records_keeps_existing_date_column():
    df = pd.DataFrame({"date": ["FY24"], "value": [3]}, index=pd.DatetimeIndex(["2024-01-01"]))
    assert frame_to_records(df)[0]["date"] == "FY24"


def test_frame_to_records_ignores_plain_index():
    records = frame_to_records(pd.DataFrame({"Revenue": [1, 2]}))
    assert records == [{"revenue": 1}, {"revenue": 2}]


def test_prices_to_observations_uses_value_field_and_dates():
    prices = [
        {"date": "2024-01-15", "open": 10, "high": 12, "low": 9, "close": 11},
        {"timestamp": "2024-01-16", "close": 12},
        {"date": "2024-01-17", "close": None},
        "skip me",
    ]
    observations = prices_to_observations(prices)
    assert [obs.value for obs in observations] == [11, 12]
    assert [obs.label for obs in observations] == ["Jan 15", "Jan 16"]
    assert observations[1].date == "2024-01-16"
    assert observations[0].has_ohlc

    highs = prices_to_observations(prices, value_field="high")
    assert [obs.value for obs in highs] == [12]


def test_prices_to_observations_without_dates_has_no_label():
    observation = prices_to_observations([{"close": 5}])[0]
    assert observation.label is None
    assert observation.date is None


def test_metrics_to_observations_labels():
    metrics = [
        {"report_period": "2024-03-31", "net_income": 100},
        {"fiscal_year": 2023, "quarter": 4, "net_income": 90},
        {"year": 2022, "quarter": 2, "net_income": 80},
        {"fiscal_year": 2021, "net_income": 70},
        {"revenue": 60},
    ]
    observations = metrics_to_observations(metrics, "net_income")
    assert [obs.value for obs in observations] == [100, 90, 80, 70]
    assert [obs.label for obs in observations] == ["Mar 31", "Q4 2023", "Q2 2022", "2021"]
    assert observations[0].date == "2024-03-31"
    assert observations[1].date is None


def test_adapters_return_empty_for_non_list_input():
    assert prices_to_observations({"close": 1}) == []
    assert metrics_to_observations(None, "revenue") == []
