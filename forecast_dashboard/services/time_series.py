"""
Time-Series Combiner - Historical and Forecast Series for the Chart

Merges a dataset's historical series with any number of per-analysis forecast
series into one chronologically sorted list of chart points.

Point Shape:
    {"date": "2023-03-01", "historical": 110.0, "forecast_A": 120.0, ...}

Each field other than `date` is optional. There is exactly one point per
distinct timestamp across all inputs: "2023-02-01" and "2023-02-01T00:00:00"
are the same point, which keeps the date string of its first occurrence
(historical points are seeded first).

Bridge Points:
For every analysis, a synthetic point is placed one calendar month before the
analysis's first forecast date. When the historical series has a value in
that month, the bridge carries it under the analysis's forecast key so the
dashed forecast line starts where the solid historical line ends. When the
bridge date coincides with a historical date the two merge into one point.

Points whose date cannot be parsed are kept, after every dated point, in
input order.

The module also parses the historical CSV files (pandas) and applies the
chart's time range window.
"""

import io
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from forecast_dashboard.models.enums import TimeRange
from forecast_dashboard.models.schemas import ForecastExtract, ForecastSeries, HistoricalPoint

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

HISTORICAL_KEY: str = 'historical'
FORECAST_KEY_PREFIX: str = 'forecast_'
DATE_FORMAT: str = '%Y-%m-%d'

# Months covered by each chart time range, measured back from the reference date
TIME_RANGE_MONTHS: Dict[TimeRange, Optional[int]] = {
    TimeRange.SIX_MONTHS: 6,
    TimeRange.ONE_YEAR: 12,
    TimeRange.THREE_YEARS: 36,
    TimeRange.FIVE_YEARS: 60,
    TimeRange.ALL: None,
}
DEFAULT_TIME_RANGE: TimeRange = TimeRange.ONE_YEAR


# =============================================================================
# DATE HELPERS
# =============================================================================

def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a date string into a timezone-naive Timestamp.

    Returns None for non-strings, empty strings and unparseable values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    timestamp = pd.to_datetime(value.strip(), errors='coerce')
    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert(None)
    return timestamp


def forecast_key(analysis_id: str) -> str:
    return f"{FORECAST_KEY_PREFIX}{analysis_id}"


def bridge_date(first_forecast_date: str) -> Optional[str]:
    """
    The date one calendar month before a forecast's first date.

    Date-only input gives a date-only result; input with a time part gives an
    ISO timestamp.

    Example:
        >>> bridge_date("2023-03-01")
        '2023-02-01'
        >>> bridge_date("2023-03-01T00:00:00")
        '2023-02-01T00:00:00'
    """
    timestamp = parse_date(first_forecast_date)
    if timestamp is None:
        return None
    bridge = timestamp - pd.DateOffset(months=1)
    if len(first_forecast_date.strip()) <= len('YYYY-MM-DD'):
        return bridge.strftime(DATE_FORMAT)
    return bridge.isoformat()


def month_label(iso_date: str) -> Optional[str]:
    """
    Month name and year of a date, e.g. "2025-01-15" -> "January 2025".

    Used to match a chart position to the monthly entries of a news file.
    """
    timestamp = parse_date(iso_date)
    if timestamp is None:
        return None
    return timestamp.strftime('%B %Y')


# =============================================================================
# COMBINER
# =============================================================================

def _historical_value_in_month(
    historical: Sequence[HistoricalPoint],
    target: pd.Timestamp,
) -> Optional[float]:
    # First historical point of the same calendar month, in input order
    for point in historical:
        timestamp = parse_date(point.date)
        if timestamp is not None and timestamp.year == target.year and timestamp.month == target.month:
            return point.historical
    return None


def combine_series(
    historical: Sequence[HistoricalPoint],
    forecasts: Mapping[str, ForecastSeries],
) -> List[Dict[str, Any]]:
    """
    Combine a historical series and per-analysis forecasts into chart points.

    Args:
        historical: Historical points in file order. Dates need not be unique;
            a repeated date keeps the last value.
        forecasts: analysis id -> parallel date/value arrays, date-ascending.

    Returns:
        One dict per distinct timestamp, sorted ascending. Points whose date
        cannot be parsed follow the dated points in input order.
    """
    # Keyed by timestamp; unparseable dates fall back to their raw string
    combined: Dict[Any, Dict[str, Any]] = {}

    def entry(date: str) -> Dict[str, Any]:
        timestamp = parse_date(date)
        key = timestamp if timestamp is not None else date
        return combined.setdefault(key, {'date': date})

    for point in historical:
        entry(point.date)[HISTORICAL_KEY] = point.historical

    for analysis_id, series in forecasts.items():
        key = forecast_key(analysis_id)
        if len(series.dates) != len(series.forecastValues):
            logger.warning(
                f"Forecast {analysis_id}: {len(series.dates)} dates but "
                f"{len(series.forecastValues)} values, extra items ignored"
            )
        if not series.dates:
            continue

        bridge = bridge_date(series.dates[0])
        if bridge is not None:
            bridge_value = _historical_value_in_month(historical, parse_date(bridge))
            if bridge_value is not None:
                entry(bridge)[key] = bridge_value

        for date, value in zip(series.dates, series.forecastValues):
            entry(date)[key] = value

    dated = sorted(
        ((key, point) for key, point in combined.items() if isinstance(key, pd.Timestamp)),
        key=lambda item: item[0],
    )
    undated = [point for key, point in combined.items() if not isinstance(key, pd.Timestamp)]
    for point in undated:
        logger.warning(f"Chart point with invalid date placed last: {point['date']!r}")

    return [point for _, point in dated] + undated


def build_forecast_inputs(extracts: Mapping[str, ForecastExtract]) -> Dict[str, ForecastSeries]:
    """Adapt forecast extracts to the combiner's per-analysis series input."""
    return {
        analysis_id: ForecastSeries(dates=list(extract.dates), forecastValues=list(extract.forecastValues))
        for analysis_id, extract in extracts.items()
    }


# =============================================================================
# HISTORICAL CSV
# =============================================================================

def parse_historical_csv(text: str) -> List[HistoricalPoint]:
    """
    Parse a two-column historical CSV (date, value) with one header line.

    Non-numeric values become 0, rows without a date are dropped and file
    order is preserved. Columns after the second are ignored.

    Args:
        text: Raw CSV text.

    Returns:
        List of HistoricalPoint; empty for an empty file or a header-only file.
    """
    if not text or not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=0,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        logger.warning(f"Unparseable historical CSV: {e}")
        return []

    if df.empty:
        return []

    dates = df.iloc[:, 0].astype(str).str.strip()
    if df.shape[1] > 1:
        values = pd.to_numeric(df.iloc[:, 1].astype(str).str.strip(), errors='coerce').fillna(0)
    else:
        values = pd.Series(0.0, index=df.index)

    points = [
        HistoricalPoint(date=date, historical=float(value))
        for date, value in zip(dates, values)
        if date
    ]
    logger.debug(f"Parsed {len(points)} historical points")
    return points


# =============================================================================
# TIME RANGE
# =============================================================================

def resolve_time_range(time_range: Union[TimeRange, str, None]) -> TimeRange:
    """TimeRange for a raw value; unknown values fall back to one year."""
    if isinstance(time_range, TimeRange):
        return time_range
    try:
        return TimeRange(time_range)
    except ValueError:
        return DEFAULT_TIME_RANGE


def filter_time_range(
    points: Sequence[HistoricalPoint],
    time_range: Union[TimeRange, str, None],
    reference_date: Optional[str] = None,
) -> List[HistoricalPoint]:
    """
    Keep the points dated on or after reference_date minus the range.

    Args:
        points: Historical points.
        time_range: "6m", "1y", "3y", "5y" or "All"; anything else means "1y".
        reference_date: End of the window. Defaults to the latest point date.

    Returns:
        The matching points in input order. "All" returns every point; points
        with unparseable dates are dropped otherwise.
    """
    months = TIME_RANGE_MONTHS[resolve_time_range(time_range)]
    if months is None:
        return list(points)

    reference = parse_date(reference_date) if reference_date else None
    if reference is None:
        parsed = [ts for ts in (parse_date(p.date) for p in points) if ts is not None]
        if not parsed:
            return []
        reference = max(parsed)

    start = reference - pd.DateOffset(months=months)
    kept = []
    for point in points:
        timestamp = parse_date(point.date)
        if timestamp is not None and timestamp >= start:
            kept.append(point)
    return kept
