import copy
import dataclasses

import numpy as np
import pandas as pd
import pytest

from fin_chart_module.errors import InvalidInputError
from fin_chart_module.processing import (
    format_date_label,
    latest_period,
    normalize,
)
from fin_chart_module.types import Observation


def test_numeric_array_gets_sequential_point_labels():
    observations = normalize([10, 20.5, 30])
    assert [obs.value for obs in observations] == [10, 20.5, 30]
    assert [obs.label for obs in observations] == ["Point 1", "Point 2", "Point 3"]


def test_point_labels_follow_source_index_when_items_are_skipped():
    observations = normalize([1, "not a number", "3.5"])
    assert [obs.value for obs in observations] == [1.0, 3.5]
    assert [obs.label for obs in observations] == ["Point 1", "Point 3"]


def test_flat_mapping_uses_keys_as_labels_in_insertion_order():
    data = {"iPhone": 50_000_000_000, "Services": "20000000000", "Mac": 8e9}
    observations = normalize(data)
    assert [obs.label for obs in observations] == ["iPhone", "Services", "Mac"]
    assert [obs.value for obs in observations] == [5e10, 2e10, 8e9]


def test_flat_mapping_drops_unparsable_values():
    observations = normalize({"A": 1, "B": "n/a", "C": None, "D": 4})
    assert [(obs.label, obs.value) for obs in observations] == [("A", 1.0), ("D", 4.0)]


def test_nested_mapping_keeps_only_latest_period():
    data = {"2024-01-31": {"A": 10, "B": 20}, "2024-02-28": {"A": 15, "B": 25}}
    observations = normalize(data)
    assert observations == [Observation(value=15, label="A"), Observation(value=25, label="B")]


def test_period_strategy_can_be_swapped():
    data = {"2024-01-31": {"A": 10, "B": 20}, "2024-02-28": {"A": 15, "B": 25}}

    def earliest(periods):
        return next(iter(periods.values()))

    observations = normalize(data, period_strategy=earliest)
    assert [obs.value for obs in observations] == [10, 20]


def test_latest_period_ignores_non_mapping_tail():
    assert latest_period({"p1": {"A": 1}, "p2": 7}) is None
    assert latest_period({}) is None
    assert latest_period({"p1": {"A": 1}}) == {"A": 1}


@pytest.mark.parametrize("data", [None, [], {}, [{"foo": "bar"}]])
def test_unusable_input_raises(data):
    with pytest.raises(InvalidInputError):
        normalize(data)


def test_missing_data_message():
    with pytest.raises(InvalidInputError, match="data required"):
        normalize(None)


def test_empty_result_message():
    with pytest.raises(InvalidInputError, match="no valid numeric data found"):
        normalize(["abc", None, True])


def test_mixed_array_uses_value_fallback_chain():
    observations = normalize([100, "200", {"value": 50}, {"net_income": 75}])
    assert [obs.value for obs in observations] == [100, 200, 50, 75]


def test_value_chain_priority_order():
    row = {"close": 5, "revenue": 4, "total_revenue": 3, "net_income": 2}
    assert normalize([row])[0].value == 2
    assert normalize([{"close": 5, "revenue": "4"}])[0].value == 4
    assert normalize([{"close": "5.5"}])[0].value == 5.5


def test_unparsable_value_field_falls_through_to_next_field():
    assert normalize([{"value": "n/a", "revenue": 9}])[0].value == 9


def test_explicit_zero_is_kept_but_unrecognised_records_are_skipped():
    observations = normalize([{"value": 0}, {"irrelevant": 1}])
    assert len(observations) == 1
    assert observations[0].value == 0


def test_nan_and_infinite_values_are_never_admitted():
    observations = normalize([float("nan"), 1, "inf", {"value": float("nan"), "close": 3}])
    assert [obs.value for obs in observations] == [1, 3]


def test_booleans_are_not_numbers():
    with pytest.raises(InvalidInputError):
        normalize([True, {"value": False}])


def test_label_chain_priority():
    rows = [
        {"value": 1, "label": "Custom", "date": "2024-01-15"},
        {"value": 2, "report_period": "2024-03-31", "date": "2024-01-15"},
        {"value": 3, "date": "2024-01-15"},
        {"value": 4, "fiscal_year": 2023, "quarter": 4, "year": 2022},
        {"value": 5, "year": 2022, "quarter": 1},
        {"value": 6, "fiscal_year": 2021.0, "year": 2020},
        {"value": 7, "year": 2020},
        {"value": 8},
    ]
    labels = [obs.label for obs in normalize(rows)]
    assert labels == ["Custom", "Mar 31", "Jan 15", "Q4 2023", "Q1 2022", "2021", "2020", None]


def test_date_field_is_verbatim_and_prefers_date_over_report_period():
    observations = normalize(
        [
            {"value": 1, "date": "2024-01-15T09:30:00", "report_period": "2024-03-31"},
            {"value": 2, "report_period": "2024-03-31"},
            {"value": 3},
        ]
    )
    assert [obs.date for obs in observations] == ["2024-01-15T09:30:00", "2024-03-31", None]
    assert observations[0].label == "Mar 31"


def test_datetime_dates_are_rendered_as_iso_text():
    observation = normalize([{"value": 1, "date": pd.Timestamp("2024-02-03")}])[0]
    assert observation.date == "2024-02-03T00:00:00"
    assert observation.label == "Feb 3"


def test_ohlc_fields_are_copied_independently():
    observation = normalize(
        [{"date": "2024-01-02", "open": "10", "high": 12, "low": 9.5, "close": 11, "volume": 100}]
    )[0]
    assert observation.value == 11
    assert (observation.open, observation.high, observation.low, observation.close) == (10, 12, 9.5, 11)
    assert observation.has_ohlc


def test_partial_ohlc_leaves_missing_fields_empty():
    observation = normalize([{"value": 3, "high": "bad", "low": 1}])[0]
    assert observation.high is None
    assert observation.low == 1
    assert not observation.has_ohlc


def test_first_entry_decides_mapping_shape():
    # A numeric first entry makes every entry a flat value, nested ones are dropped.
    assert normalize({"a": 5, "b": {"x": 1}}) == [Observation(value=5, label="a")]
    # A non-numeric, non-mapping first entry matches no mapping rule at all.
    with pytest.raises(InvalidInputError):
        normalize({"a": "x", "b": 5})
    # Nested periods whose last entry is not a mapping yield nothing.
    with pytest.raises(InvalidInputError):
        normalize({"p1": {"A": 1}, "p2": 7})


def test_scalar_and_string_inputs_are_rejected():
    for data in (5, "100", b"1"):
        with pytest.raises(InvalidInputError):
            normalize(data)


def test_input_is_not_mutated():
    data = [{"value": "1", "date": "2024-01-01"}, 2, {"A": 1}]
    snapshot = copy.deepcopy(data)
    normalize(data)
    assert data == snapshot


def test_observations_are_immutable():
    observation = normalize([1])[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        observation.value = 2


def test_normalised_output_round_trips():
    data = [
        100,
        {"report_period": "2024-03-31", "net_income": 7},
        {"date": "2024-01-02", "open": 1, "high": 2, "low": 0.5, "close": 1.5},
    ]
    first = normalize(data)
    second = normalize([obs.to_dict() for obs in first])
    assert second == first


def test_dataframe_input_uses_lowercase_columns_and_index_dates():
    index = pd.date_range("2024-01-02", periods=2, freq="D")
    df = pd.DataFrame(
        {"Open": [1.0, 2.0], "High": [2.0, 3.0], "Low": [0.5, 1.5], "Close": [1.5, 2.5]},
        index=index,
    )
    observations = normalize(df)
    assert [obs.value for obs in observations] == [1.5, 2.5]
    assert [obs.label for obs in observations] == ["Jan 2", "Jan 3"]
    assert observations[0].date == "2024-01-02T00:00:00"
    assert observations[1].has_ohlc


def test_series_input_is_a_flat_mapping():
    series = pd.Series({"Cloud": 12.0, "Devices": 8.0})
    assert [(obs.label, obs.value) for obs in normalize(series)] == [("Cloud", 12.0), ("Devices", 8.0)]


def test_numpy_array_input():
    observations = normalize(np.array([1.0, np.nan, 3.0]))
    assert [(obs.label, obs.value) for obs in observations] == [("Point 1", 1.0), ("Point 3", 3.0)]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-01-15", "Jan 15"),
        ("2024-03-31T00:00:00Z", "Mar 31"),
        ("December 5, 2023", "Dec 5"),
        ("garbage-value-xyz", "garbage-va"),
        ("", ""),
        ("2024-13-45", "2024-13-45"),
    ],
)
def test_format_date_label(text, expected):
    assert format_date_label(text) == expected
