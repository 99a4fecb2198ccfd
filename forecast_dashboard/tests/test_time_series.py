"""
Test suite for the Time-Series Combiner and historical series helpers.

Verifies:
1. Bridge points connect history to each forecast
2. One point per distinct date, sorted by timestamp
3. Historical CSV parsing tolerates bad values
4. Time range filtering relative to a reference date
"""

from typing import List

import pytest

from forecast_dashboard.models import ForecastExtract, ForecastSeries, HistoricalPoint, TimeRange
from forecast_dashboard.services.time_series import (
    bridge_date,
    build_forecast_inputs,
    combine_series,
    filter_time_range,
    month_label,
    parse_date,
    parse_historical_csv,
)


def history(*pairs) -> List[HistoricalPoint]:
    return [HistoricalPoint(date=d, historical=v) for d, v in pairs]


# =============================================================================
# COMBINER
# =============================================================================


class TestCombineSeries:

    def test_bridge_merges_into_historical_point(self) -> None:
        combined = combine_series(
            history(("2023-01-01", 100), ("2023-02-01", 110)),
            {"A": ForecastSeries(dates=["2023-03-01", "2023-04-01"], forecastValues=[120, 125])},
        )

        assert combined == [
            {"date": "2023-01-01", "historical": 100},
            {"date": "2023-02-01", "historical": 110, "forecast_A": 110},
            {"date": "2023-03-01", "forecast_A": 120},
            {"date": "2023-04-01", "forecast_A": 125},
        ]

    def test_bridge_creates_point_inside_historical_month(self) -> None:
        combined = combine_series(
            history(("2023-02-15", 110)),
            {"A": ForecastSeries(dates=["2023-03-01"], forecastValues=[120])},
        )
        assert [p["date"] for p in combined] == ["2023-02-01", "2023-02-15", "2023-03-01"]
        assert combined[0] == {"date": "2023-02-01", "forecast_A": 110}

    def test_no_bridge_without_history_in_month(self) -> None:
        combined = combine_series(
            history(("2022-12-01", 90)),
            {"A": ForecastSeries(dates=["2023-03-01"], forecastValues=[120])},
        )
        assert [p["date"] for p in combined] == ["2022-12-01", "2023-03-01"]

    def test_multiple_analyses_share_dates(self) -> None:
        combined = combine_series(
            history(("2023-02-01", 110)),
            {
                "A": ForecastSeries(dates=["2023-03-01", "2023-04-01"], forecastValues=[120, 125]),
                "B": ForecastSeries(dates=["2023-03-01"], forecastValues=[118]),
            },
        )
        assert combined[0] == {"date": "2023-02-01", "historical": 110, "forecast_A": 110, "forecast_B": 110}
        assert combined[1] == {"date": "2023-03-01", "forecast_A": 120, "forecast_B": 118}

    def test_dates_unique_and_ascending(self) -> None:
        historical = history(("2023-03-01", 3), ("2023-01-01", 1), ("2023-02-01", 2), ("2023-01-01", 5))
        forecasts = {
            "A": ForecastSeries(dates=["2023-02-01", "2023-05-01"], forecastValues=[2.5, 6]),
            "B": ForecastSeries(dates=["2023-04-01"], forecastValues=[4]),
        }
        combined = combine_series(historical, forecasts)
        dates = [p["date"] for p in combined]

        assert len(dates) == len(set(dates))
        assert [parse_date(d) for d in dates] == sorted(parse_date(d) for d in dates)
        assert {p.date for p in historical} <= set(dates)
        assert {d for s in forecasts.values() for d in s.dates} <= set(dates)

    def test_repeated_historical_date_keeps_last_value(self) -> None:
        combined = combine_series(history(("2023-01-01", 1), ("2023-01-01", 5)), {})
        assert combined == [{"date": "2023-01-01", "historical": 5}]

    def test_invalid_dates_follow_dated_points(self) -> None:
        combined = combine_series(
            history(("not a date", 1), ("2023-02-01", 2), ("later", 3), ("2023-01-01", 4)),
            {},
        )
        assert [p["date"] for p in combined] == ["2023-01-01", "2023-02-01", "not a date", "later"]
        assert combined[2] == {"date": "not a date", "historical": 1}

    def test_datetime_strings_merge_with_bridge(self) -> None:
        combined = combine_series(
            history(("2023-02-01T00:00:00", 110)),
            {"A": ForecastSeries(dates=["2023-03-01T00:00:00"], forecastValues=[120])},
        )
        assert combined == [
            {"date": "2023-02-01T00:00:00", "historical": 110, "forecast_A": 110},
            {"date": "2023-03-01T00:00:00", "forecast_A": 120},
        ]

    def test_mixed_date_formats_share_one_point(self) -> None:
        combined = combine_series(
            history(("2023-02-01", 110), ("2023-03-01T00:00:00", 115)),
            {"A": ForecastSeries(dates=["2023-03-01", "2023-04-01"], forecastValues=[120, 125])},
        )
        assert [p["date"] for p in combined] == ["2023-02-01", "2023-03-01T00:00:00", "2023-04-01"]
        assert combined[0]["forecast_A"] == 110
        assert combined[1] == {"date": "2023-03-01T00:00:00", "historical": 115, "forecast_A": 120}

    def test_empty_forecast(self) -> None:
        combined = combine_series(history(("2023-01-01", 1)), {"A": ForecastSeries()})
        assert combined == [{"date": "2023-01-01", "historical": 1}]

    def test_build_forecast_inputs(self) -> None:
        extract = ForecastExtract(forecastValues=[1.0, 2.0], dates=["2025-01-01", "2025-02-01"], totalPoints=2)
        inputs = build_forecast_inputs({"7": extract})
        assert inputs == {"7": ForecastSeries(dates=["2025-01-01", "2025-02-01"], forecastValues=[1.0, 2.0])}


class TestDateHelpers:

    @pytest.mark.parametrize("first,expected", [
        ("2023-03-01", "2023-02-01"),
        ("2023-01-15", "2022-12-15"),
        ("2023-03-31", "2023-02-28"),
        ("2023-03-01T00:00:00", "2023-02-01T00:00:00"),
        ("2023-03-01 12:30:00", "2023-02-01T12:30:00"),
    ])
    def test_bridge_date(self, first, expected) -> None:
        assert bridge_date(first) == expected

    def test_bridge_date_invalid(self) -> None:
        assert bridge_date("soon") is None

    def test_month_label(self) -> None:
        assert month_label("2025-01-15") == "January 2025"
        assert month_label("") is None


# =============================================================================
# HISTORICAL CSV
# =============================================================================


class TestParseHistoricalCsv:

    def test_two_column_csv(self) -> None:
        points = parse_historical_csv("date,value\n2024-01-01,100\n2024-02-01,105.5\n")
        assert points == history(("2024-01-01", 100.0), ("2024-02-01", 105.5))

    def test_non_numeric_values_become_zero(self) -> None:
        points = parse_historical_csv("date,value\n2024-01-01,abc\n2024-02-01,\n")
        assert [p.historical for p in points] == [0.0, 0.0]

    def test_rows_without_date_are_dropped(self) -> None:
        points = parse_historical_csv("date,value\n,100\n2024-02-01,7\n")
        assert points == history(("2024-02-01", 7.0))

    def test_file_order_is_kept(self) -> None:
        points = parse_historical_csv("d,v\n2024-03-01,3\n2024-01-01,1\n")
        assert [p.date for p in points] == ["2024-03-01", "2024-01-01"]

    def test_extra_columns_ignored(self) -> None:
        points = parse_historical_csv("date,value,note\n2024-01-01,4,x\n")
        assert points == history(("2024-01-01", 4.0))

    @pytest.mark.parametrize("text", ["", "   \n", "date,value\n"])
    def test_empty_inputs(self, text) -> None:
        assert parse_historical_csv(text) == []


# =============================================================================
# TIME RANGE
# =============================================================================


class TestFilterTimeRange:

    @pytest.fixture
    def monthly(self) -> List[HistoricalPoint]:
        return history(
            ("2018-01-01", 0),
            ("2020-07-01", 1),
            ("2022-06-01", 2),
            ("2024-06-01", 3),
            ("2024-12-01", 4),
            ("2025-06-01", 5),
        )

    @pytest.mark.parametrize("time_range,expected", [
        ("6m", [4, 5]),
        ("1y", [3, 4, 5]),
        ("3y", [2, 3, 4, 5]),
        ("5y", [1, 2, 3, 4, 5]),
        ("All", [0, 1, 2, 3, 4, 5]),
        (TimeRange.ONE_YEAR, [3, 4, 5]),
        ("2w", [3, 4, 5]),
    ])
    def test_ranges(self, monthly, time_range, expected) -> None:
        kept = filter_time_range(monthly, time_range, "2025-06-01")
        assert [p.historical for p in kept] == expected

    def test_reference_defaults_to_latest_point(self, monthly) -> None:
        assert [p.historical for p in filter_time_range(monthly, "6m")] == [4, 5]

    def test_unparseable_dates_are_dropped(self) -> None:
        points = history(("garbage", 1), ("2025-05-01", 2))
        assert [p.historical for p in filter_time_range(points, "1y", "2025-06-01")] == [2]

    def test_all_keeps_everything(self) -> None:
        points = history(("garbage", 1))
        assert filter_time_range(points, "All") == points
