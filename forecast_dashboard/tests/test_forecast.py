"""
Test suite for forecast document extraction and the forecast table.
"""

import pytest

from forecast_dashboard.models import ForecastExtract, ForecastTableRow
from forecast_dashboard.services.forecast import (
    build_forecast_rows,
    extract_forecast,
    forecast_series_of,
    paginate,
    resolve_table_label,
    to_forecast_points,
)


class TestExtractForecast:

    def test_explicit_quantiles_sorted_by_date(self, quantile_forecast_document) -> None:
        extract = extract_forecast(quantile_forecast_document)

        assert extract.dates == ["2025-07-01", "2025-08-01"]
        assert extract.forecastValues == [120.0, 125.0]
        assert extract.sortedQuantileKeys == ["0.05", "0.5", "0.95"]
        assert extract.allQuantiles["0.05"] == [105.0, 110.0]
        assert extract.allQuantiles["0.95"] == [135.0, 140.0]
        assert extract.allSamples == {}
        assert extract.totalPoints == 2

    def test_quantiles_from_samples(self, sample_forecast_document) -> None:
        extract = extract_forecast(sample_forecast_document)

        assert extract.sortedQuantileKeys == ["0.05", "0.15", "0.25", "0.5", "0.75", "0.85", "0.95"]
        july = [extract.allQuantiles[label][0] for label in extract.sortedQuantileKeys]
        assert july == [100.0, 110.0, 110.0, 120.0, 130.0, 130.0, 140.0]
        assert extract.allSamples["2025-07-01"] == [100.0, 110.0, 120.0, 130.0, 140.0]

    def test_custom_quantile_levels(self, sample_forecast_document) -> None:
        extract = extract_forecast(sample_forecast_document, quantile_levels=[10, 90])
        assert extract.sortedQuantileKeys == ["0.1", "0.9"]

    def test_explicit_quantiles_win_over_samples(self) -> None:
        extract = extract_forecast({"forecast_series": {
            "2025-01-01": {
                "forecast": 10,
                "quantile_forecast": {"0.5": 11},
                "forecast_samples": [1, 2, 3],
            },
        }})
        assert extract.allQuantiles == {"0.5": [11.0]}
        assert extract.allSamples == {"2025-01-01": [1.0, 2.0, 3.0]}

    def test_quantile_columns_are_null_padded(self) -> None:
        extract = extract_forecast({"forecast_series": {
            "2025-01-01": {"forecast": 1, "quantile_forecast": {"0.05": 0.5}},
            "2025-02-01": {"forecast": 2, "quantile_forecast": {"0.5": 2.0}},
            "2025-03-01": {"forecast": 3},
        }})
        assert extract.allQuantiles == {
            "0.05": [0.5, None, None],
            "0.5": [None, 2.0, None],
        }
        assert all(len(column) == len(extract.dates) for column in extract.allQuantiles.values())

    def test_points_without_numeric_forecast_are_skipped(self) -> None:
        extract = extract_forecast({"forecast_series": {
            "2025-01-01": {"forecast": "n/a"},
            "2025-02-01": "broken",
            "2025-03-01": {"forecast": 3},
        }})
        assert extract.dates == ["2025-03-01"]

    def test_invalid_dates_sort_last(self) -> None:
        extract = extract_forecast({"forecast_series": {
            "someday": {"forecast": 9},
            "2025-02-01": {"forecast": 2},
            "2025-01-01": {"forecast": 1},
        }})
        assert extract.dates == ["2025-01-01", "2025-02-01", "someday"]

    @pytest.mark.parametrize("document", [None, {}, {"data": {}}, {"forecast_series": []}, "text"])
    def test_empty_documents(self, document) -> None:
        assert extract_forecast(document) == ForecastExtract()

    def test_series_lookup_prefers_top_level(self) -> None:
        document = {"forecast_series": {"a": 1}, "data": {"forecast_series": {"b": 2}}}
        assert forecast_series_of(document) == {"a": 1}

    def test_forecast_points(self, sample_forecast_document) -> None:
        points = to_forecast_points(extract_forecast(sample_forecast_document))
        assert [p.date for p in points] == ["2025-07-01", "2025-08-01"]
        assert points[1].forecast == 121.0
        assert points[1].quantiles["0.5"] == 130.0
        assert points[1].samples == [110.0, 120.0, 130.0, 140.0, 150.0]


# =============================================================================
# FORECAST TABLE
# =============================================================================


class TestForecastTable:

    def test_default_confidence_columns(self, quantile_forecast_document) -> None:
        rows, lower, upper = build_forecast_rows("1", extract_forecast(quantile_forecast_document))

        assert (lower, upper) == ("0.05", "0.95")
        assert rows[0] == ForecastTableRow(
            id="1-2025-07-01", date="2025-07-01", forecast=120.0, lower=105.0, upper=135.0, analysisId="1",
        )

    def test_missing_labels_fall_back_to_closest(self, sample_forecast_document) -> None:
        extract = extract_forecast(sample_forecast_document)
        rows, lower, upper = build_forecast_rows("2", extract, "0.3", "0.99")

        assert (lower, upper) == ("0.25", "0.95")
        assert (rows[0].lower, rows[0].upper) == (110.0, 140.0)

    def test_label_without_available_columns_is_kept(self) -> None:
        assert resolve_table_label("0.1", [], "0.05") == "0.1"
        assert resolve_table_label(None, [], "0.05") == "0.05"

    def test_rows_without_quantiles(self) -> None:
        extract = extract_forecast({"forecast_series": {"2025-01-01": {"forecast": 4}}})
        rows, _, _ = build_forecast_rows("9", extract)
        assert rows[0].lower is None
        assert rows[0].upper is None


class TestPaginate:

    @pytest.fixture
    def rows(self):
        return [
            ForecastTableRow(id=f"a-{i}", date=f"2025-01-{i + 1:02d}", forecast=float(i), analysisId="a")
            for i in range(25)
        ]

    def test_first_page(self, rows) -> None:
        page = paginate(rows)
        assert [r.id for r in page.rows] == [f"a-{i}" for i in range(10)]
        assert (page.pageIndex, page.pageCount, page.totalRows) == (0, 3, 25)

    def test_last_page_is_partial(self, rows) -> None:
        assert len(paginate(rows, page_index=2).rows) == 5

    @pytest.mark.parametrize("index,expected", [(7, 2), (-1, 0)])
    def test_index_is_clamped(self, rows, index, expected) -> None:
        assert paginate(rows, page_index=index).pageIndex == expected

    def test_labels_are_passed_through(self, rows) -> None:
        page = paginate(rows, page_size=5, lower_label="0.05", upper_label="0.95")
        assert (page.pageSize, page.pageCount) == (5, 5)
        assert (page.lowerLabel, page.upperLabel) == ("0.05", "0.95")

    def test_no_rows(self) -> None:
        page = paginate([])
        assert page.rows == []
        assert (page.pageIndex, page.pageCount, page.totalRows) == (0, 0, 0)
