"""
Forecast Document Extraction - forecast.json to Chart and Table Structures

A forecast document maps ISO dates to per-date forecast objects:

    {
        "forecast_series": {
            "2025-07-01": {
                "forecast": 123.4,
                "quantile_forecast": {"0.05": 101.2, "0.95": 140.8},
                "forecast_samples": [118.0, 131.5, ...]
            },
            ...
        }
    }

Older exports nest the series under "data". Both layouts are accepted.

Extraction Rules:
- Points are ordered by parsed date; points without a numeric `forecast` are
  skipped.
- `forecast_samples` are sorted ascending and kept per date.
- Explicit `quantile_forecast` values take precedence. Only when a point has
  no quantile map are quantiles computed from its samples, at the configured
  percent levels.
- Every quantile column is parallel to `dates`, padded with None where a point
  lacks that label.

The table helpers resolve the selected lower/upper confidence columns per row
and paginate the rows.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from forecast_dashboard.models.schemas import (
    ForecastExtract,
    ForecastPoint,
    ForecastTablePage,
    ForecastTableRow,
)
from forecast_dashboard.services.driver_records import as_number
from forecast_dashboard.services.quantiles import (
    find_closest_quantile,
    parse_quantile_label,
    quantile_label,
    resolve_quantile,
    value_at_quantile,
)
from forecast_dashboard.services.time_series import parse_date

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_QUANTILE_LEVELS: Tuple[int, ...] = (5, 15, 25, 50, 75, 85, 95)
DEFAULT_LOWER_LABEL: str = '0.05'
DEFAULT_UPPER_LABEL: str = '0.95'
DEFAULT_PAGE_SIZE: int = 10


# =============================================================================
# EXTRACTION
# =============================================================================

def forecast_series_of(document: Any) -> Optional[Mapping[str, Any]]:
    """The date -> point mapping of a forecast document, or None."""
    if not isinstance(document, Mapping):
        return None
    series = document.get('forecast_series')
    if not series:
        data = document.get('data')
        if isinstance(data, Mapping):
            series = data.get('forecast_series')
    return series if isinstance(series, Mapping) else None


def _sorted_by_date(series: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    # Unparseable dates sort after every valid one, keeping document order
    def key(item: Tuple[str, Any]):
        timestamp = parse_date(item[0])
        return (timestamp is None, timestamp if timestamp is not None else 0)

    return sorted(series.items(), key=key)


def _numeric_samples(value: Any) -> Optional[List[float]]:
    if not isinstance(value, list):
        return None
    samples = [number for number in (as_number(v) for v in value) if number is not None]
    return sorted(samples)


def extract_forecast(
    document: Any,
    quantile_levels: Sequence[int] = DEFAULT_QUANTILE_LEVELS,
) -> ForecastExtract:
    """
    Flatten a forecast document for the chart and the forecast table.

    Args:
        document: Parsed forecast.json.
        quantile_levels: Percent levels computed from samples for points that
            carry no explicit quantile map.

    Returns:
        ForecastExtract; empty when the document has no forecast series.
    """
    series = forecast_series_of(document)
    if series is None:
        logger.debug("Forecast document has no forecast_series")
        return ForecastExtract()

    dates: List[str] = []
    forecast_values: List[float] = []
    all_quantiles: Dict[str, List[Optional[float]]] = {}
    all_samples: Dict[str, List[float]] = {}

    for date, point in _sorted_by_date(series):
        if not isinstance(point, Mapping):
            continue
        forecast = as_number(point.get('forecast'))
        if forecast is None:
            continue

        dates.append(date)
        forecast_values.append(forecast)
        position = len(dates) - 1

        samples = _numeric_samples(point.get('forecast_samples'))
        if samples is not None:
            all_samples[date] = samples

        explicit = point.get('quantile_forecast')
        if isinstance(explicit, Mapping):
            values = {str(label): as_number(value) for label, value in explicit.items()}
            values = {label: value for label, value in values.items() if value is not None}
        elif samples:
            values = {
                quantile_label(level): value_at_quantile(samples, level)
                for level in quantile_levels
            }
        else:
            values = {}

        for label, value in values.items():
            column = all_quantiles.setdefault(label, [None] * position)
            column.append(value)

        for column in all_quantiles.values():
            if len(column) < len(dates):
                column.append(None)

    sorted_keys = sorted(all_quantiles, key=lambda label: parse_quantile_label(label) or 0.0)

    logger.debug(f"Extracted {len(dates)} forecast points with {len(sorted_keys)} quantile columns")
    return ForecastExtract(
        forecastValues=forecast_values,
        dates=dates,
        allQuantiles=all_quantiles,
        sortedQuantileKeys=sorted_keys,
        allSamples=all_samples,
        totalPoints=len(forecast_values),
    )


def quantiles_at(extract: ForecastExtract, index: int) -> Dict[str, float]:
    """Non-null quantile values of the point at `index`."""
    return {
        label: column[index]
        for label, column in extract.allQuantiles.items()
        if index < len(column) and column[index] is not None
    }


def to_forecast_points(extract: ForecastExtract) -> List[ForecastPoint]:
    """Per-date ForecastPoint view of an extract."""
    return [
        ForecastPoint(
            date=date,
            forecast=forecast,
            quantiles=quantiles_at(extract, index),
            samples=extract.allSamples.get(date, []),
        )
        for index, (date, forecast) in enumerate(zip(extract.dates, extract.forecastValues))
    ]


# =============================================================================
# FORECAST TABLE
# =============================================================================

def resolve_table_label(label: Optional[str], available: Sequence[str], default: str) -> str:
    """
    Quantile label to show for a table column.

    A requested label the analysis does not offer is replaced by the closest
    available one; with nothing available the requested label is kept and
    resolved from samples, if any.
    """
    requested = label or default
    if not available or requested in available:
        return requested
    return find_closest_quantile(requested, available) or requested


def build_forecast_rows(
    analysis_id: str,
    extract: ForecastExtract,
    lower_label: Optional[str] = None,
    upper_label: Optional[str] = None,
) -> Tuple[List[ForecastTableRow], str, str]:
    """
    Forecast table rows with the selected confidence columns.

    Args:
        analysis_id: Analysis the rows belong to; part of each row id.
        extract: Extracted forecast document.
        lower_label: Requested lower quantile label (default "0.05").
        upper_label: Requested upper quantile label (default "0.95").

    Returns:
        (rows, lower_label, upper_label) with the labels actually used.
    """
    lower = resolve_table_label(lower_label, extract.sortedQuantileKeys, DEFAULT_LOWER_LABEL)
    upper = resolve_table_label(upper_label, extract.sortedQuantileKeys, DEFAULT_UPPER_LABEL)

    rows: List[ForecastTableRow] = []
    for index, (date, forecast) in enumerate(zip(extract.dates, extract.forecastValues)):
        quantiles = quantiles_at(extract, index)
        samples = extract.allSamples.get(date)
        rows.append(ForecastTableRow(
            id=f"{analysis_id}-{date}",
            date=date,
            forecast=forecast,
            lower=resolve_quantile(quantiles, samples, lower),
            upper=resolve_quantile(quantiles, samples, upper),
            analysisId=analysis_id,
        ))
    return rows, lower, upper


def paginate(
    rows: Sequence[ForecastTableRow],
    page_index: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
    lower_label: Optional[str] = None,
    upper_label: Optional[str] = None,
) -> ForecastTablePage:
    """
    One page of table rows.

    A page index past the end is clamped to the last page; negative indices
    are clamped to the first.
    """
    page_size = max(1, int(page_size))
    total = len(rows)
    page_count = math.ceil(total / page_size)
    page_index = max(0, min(int(page_index), max(page_count - 1, 0)))

    start = page_index * page_size
    return ForecastTablePage(
        rows=list(rows[start:start + page_size]),
        pageIndex=page_index,
        pageSize=page_size,
        pageCount=page_count,
        totalRows=total,
        lowerLabel=lower_label,
        upperLabel=upper_label,
    )
