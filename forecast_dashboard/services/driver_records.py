"""
Driver Record Normalizer - Raw Drivers Report to Canonical DriverRecord

This module converts the loosely-typed entries of a drivers report into
canonical DriverRecord models. It works in two explicit steps:

1. Parse: `parse_raw_entry` turns one untyped JSON value into a RawDriverEntry
   whose fields each come from a small, closed set of accepted shapes. Any
   other shape collapses to the field's empty value.
2. Normalize: `normalize_driver` applies the resolution rules (region,
   category, importance/direction, lag) to a RawDriverEntry.

Resolution Rules:
- Name: `driver_name` is the only required field; entries without a non-empty
  string name are dropped (None is returned, nothing is raised).
- Regions:
  * list of {name} objects -> their names
  * list of strings -> used directly
  * otherwise: scan the comma-separated parts of the name for a region
    indicator; the first matching part yields ["World", part]
  * fallback ["World"]
- Category: first element of a `category` list (object name or string), or a
  bare {name} object; otherwise "Unknown".
- Importance / direction: pearson overall mean, else granger overall mean,
  else 0. importance = |mean| x 100 (capped at 100), direction = mean.
- Lag: `overall_lag` verbatim, else the pearson `lag_<n>` key with the largest
  absolute value as "<n> month(s)", else "Unknown".

The functions here are deterministic and stateless. Map coordinates are
assigned separately, per analysis batch, by geo_coordinates.CoordinateAssigner.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from forecast_dashboard.models.enums import ImpactDirection
from forecast_dashboard.models.schemas import DriverRecord
from forecast_dashboard.services.geo_coordinates import CoordinateAssigner

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Tokens searched for in the comma-separated parts of a driver name when the
# report carries no region list
REGION_INDICATORS: Tuple[str, ...] = (
    'US',
    'United States',
    'Europe',
    'Asia',
    'Africa',
    'Australia',
    'Canada',
    'Mexico',
    'Brazil',
    'China',
    'Japan',
    'India',
)

DEFAULT_REGION: str = 'World'
UNKNOWN_CATEGORY: str = 'Unknown'
UNKNOWN_LAG: str = 'Unknown'

LAG_KEY_PATTERN = re.compile(r'^lag_(\d+)$')


# =============================================================================
# PARSED SHAPES
# =============================================================================

@dataclass(frozen=True)
class CategoryRef:
    """
    Category reference as found in a report entry.

    Either part may be missing: string categories carry only a name, bare
    numeric categories carry only an id.
    """
    name: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class CorrelationStats:
    """Overall mean plus numeric `lag_<n>` values, in report key order."""
    mean: Optional[float] = None
    lags: Tuple[Tuple[str, float], ...] = ()


@dataclass(frozen=True)
class RawDriverEntry:
    """
    One drivers-report entry after shape validation.

    Every field holds either a value of the documented type or its empty
    value; no further type probing is needed downstream.
    """
    driver_name: Optional[str] = None
    regions: Tuple[str, ...] = ()
    category: CategoryRef = field(default_factory=CategoryRef)
    is_public: bool = False
    importance_mean: Optional[float] = None
    pearson: Optional[CorrelationStats] = None
    granger: Optional[CorrelationStats] = None
    overall_lag: Optional[str] = None
    normalized_series: Optional[Dict[str, Optional[float]]] = None


# =============================================================================
# PARSING HELPERS
# =============================================================================

def as_number(value: Any) -> Optional[float]:
    """
    Return value as a finite float, or None.

    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def as_category_id(value: Any) -> Optional[int]:
    """Return value as an integral category id, or None."""
    number = as_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _overall_mean(value: Any) -> Optional[float]:
    # {"overall": {"mean": <number>}}
    if not isinstance(value, Mapping):
        return None
    overall = value.get('overall')
    if not isinstance(overall, Mapping):
        return None
    return as_number(overall.get('mean'))


def parse_regions(value: Any) -> Tuple[str, ...]:
    """
    Parse a `region` field.

    Accepted shapes, checked on the first element:
    - [{"name": str}, ...] -> names (elements without a string name skipped)
    - [str, ...] -> strings (non-strings skipped)
    Anything else yields an empty tuple.
    """
    if not isinstance(value, list) or not value:
        return ()

    first = value[0]
    if isinstance(first, Mapping) and isinstance(first.get('name'), str):
        return tuple(
            item['name'] for item in value
            if isinstance(item, Mapping) and isinstance(item.get('name'), str)
        )
    if isinstance(first, str):
        return tuple(item for item in value if isinstance(item, str))
    return ()


def parse_category(value: Any) -> CategoryRef:
    """
    Parse a `category` field.

    Accepted shapes:
    - {"id": number, "name": str}
    - [{"id": number, "name": str}, ...] / [str, ...] / [number, ...]
      (first element only)
    - str (name only) or number (id only)
    """
    if isinstance(value, list):
        if not value:
            return CategoryRef()
        value = value[0]

    if isinstance(value, Mapping):
        name = value.get('name')
        return CategoryRef(
            name=name if isinstance(name, str) else None,
            id=as_category_id(value.get('id')),
        )
    if isinstance(value, str):
        return CategoryRef(name=value)

    return CategoryRef(id=as_category_id(value))


def parse_correlation(value: Any) -> Optional[CorrelationStats]:
    """Parse a `pearson_correlation` / `granger_correlation` object."""
    if not isinstance(value, Mapping):
        return None

    lags: List[Tuple[str, float]] = []
    for key, lag_value in value.items():
        match = LAG_KEY_PATTERN.match(str(key))
        number = as_number(lag_value)
        if match and number is not None:
            lags.append((match.group(1), number))

    return CorrelationStats(mean=_overall_mean(value), lags=tuple(lags))


def parse_normalized_series(value: Any) -> Optional[Dict[str, Optional[float]]]:
    if not isinstance(value, Mapping):
        return None
    return {
        str(date_key): as_number(point)
        for date_key, point in value.items()
    }


def parse_raw_entry(value: Any) -> Optional[RawDriverEntry]:
    """
    Validate one untyped drivers-report value into a RawDriverEntry.

    Returns:
        RawDriverEntry, or None when the value is not a JSON object at all.
    """
    if not isinstance(value, Mapping):
        return None

    name = value.get('driver_name')
    overall_lag = value.get('overall_lag')

    return RawDriverEntry(
        driver_name=name if isinstance(name, str) and name else None,
        regions=parse_regions(value.get('region')),
        category=parse_category(value.get('category')),
        is_public=value.get('is_public') is True,
        importance_mean=_overall_mean(value.get('importance')),
        pearson=parse_correlation(value.get('pearson_correlation')),
        granger=parse_correlation(value.get('granger_correlation')),
        overall_lag=overall_lag if isinstance(overall_lag, str) and overall_lag else None,
        normalized_series=parse_normalized_series(value.get('normalized_series')),
    )


def report_entries(report: Any) -> List[Tuple[str, Any]]:
    """
    Ordered (id, value) pairs of a drivers report.

    The order is the report's key order. Map placement depends on it, so it
    is part of every downstream signature rather than an accident of dict
    iteration. A report that is not a JSON object yields no entries.
    """
    if not isinstance(report, Mapping):
        return []
    return [(str(key), entry) for key, entry in report.items()]


def parse_report(report: Any) -> List[Tuple[str, RawDriverEntry]]:
    """Parse every object entry of a report, keeping key order."""
    parsed: List[Tuple[str, RawDriverEntry]] = []
    for driver_id, value in report_entries(report):
        entry = parse_raw_entry(value)
        if entry is None:
            logger.warning(f"Driver {driver_id} skipped: entry is not an object")
            continue
        parsed.append((driver_id, entry))
    return parsed


# =============================================================================
# RESOLUTION RULES
# =============================================================================

def regions_from_name(driver_name: str) -> List[str]:
    """
    Look for a region indicator in the comma-separated parts of a name.

    Only names with at least two parts are searched. The first part containing
    any indicator yields ["World", <trimmed part>].
    """
    parts = driver_name.split(',')
    if len(parts) < 2:
        return []
    for part in parts:
        trimmed = part.strip()
        if any(indicator in trimmed for indicator in REGION_INDICATORS):
            return [DEFAULT_REGION, trimmed]
    return []


def resolve_regions(entry: RawDriverEntry) -> List[str]:
    if entry.regions:
        return list(entry.regions)
    if entry.driver_name:
        from_name = regions_from_name(entry.driver_name)
        if from_name:
            return from_name
    return [DEFAULT_REGION]


def resolve_category_name(category: CategoryRef) -> str:
    return category.name if category.name else UNKNOWN_CATEGORY


def resolve_correlation_mean(entry: RawDriverEntry) -> float:
    """Pearson overall mean, else granger overall mean, else 0."""
    if entry.pearson is not None and entry.pearson.mean is not None:
        return entry.pearson.mean
    if entry.granger is not None and entry.granger.mean is not None:
        return entry.granger.mean
    return 0.0


def importance_from_mean(mean: float) -> float:
    """|mean| x 100, capped to the [0, 100] importance scale."""
    return min(abs(mean) * 100.0, 100.0)


def impact_from_direction(direction: float) -> ImpactDirection:
    if direction > 0:
        return ImpactDirection.POSITIVE
    if direction < 0:
        return ImpactDirection.NEGATIVE
    return ImpactDirection.NEUTRAL


def resolve_lag(entry: RawDriverEntry) -> str:
    """
    Lag label of a driver.

    Ties between lag keys of equal magnitude go to the later key.
    """
    if entry.overall_lag:
        return entry.overall_lag
    if entry.pearson is None or not entry.pearson.lags:
        return UNKNOWN_LAG

    best_lag, best_value = entry.pearson.lags[0]
    for lag, value in entry.pearson.lags[1:]:
        if abs(value) >= abs(best_value):
            best_lag, best_value = lag, value
    return f"{best_lag} month(s)"


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_entry(driver_id: str, entry: RawDriverEntry) -> Optional[DriverRecord]:
    """
    Build a DriverRecord (without coordinates) from a parsed entry.

    Returns:
        DriverRecord, or None when the entry has no driver name.
    """
    if entry.driver_name is None:
        logger.warning(f"Driver {driver_id} dropped: missing driver_name")
        return None

    mean = resolve_correlation_mean(entry)

    return DriverRecord(
        id=driver_id,
        name=entry.driver_name,
        regions=resolve_regions(entry),
        category=resolve_category_name(entry.category),
        isPublic=entry.is_public,
        importance=importance_from_mean(mean),
        direction=mean,
        impact=impact_from_direction(mean),
        lag=resolve_lag(entry),
        normalizedSeries=entry.normalized_series,
        rawImportance=entry.importance_mean,
    )


def normalize_driver(driver_id: str, value: Any) -> Optional[DriverRecord]:
    """
    Normalize one untyped (id, entry) pair of a drivers report.

    Args:
        driver_id: The report key; becomes DriverRecord.id.
        value: The raw JSON value stored under that key.

    Returns:
        DriverRecord without coordinates, or None if the entry is dropped.

    Example:
        >>> record = normalize_driver("d1", {
        ...     "driver_name": "X",
        ...     "region": ["United States of America"],
        ...     "pearson_correlation": {"overall": {"mean": -0.42}},
        ... })
        >>> round(record.importance, 6), record.direction
        (42.0, -0.42)
    """
    entry = parse_raw_entry(value)
    if entry is None:
        logger.warning(f"Driver {driver_id} dropped: entry is not an object")
        return None
    return normalize_entry(driver_id, entry)


def build_driver_records(entries: Sequence[Tuple[str, Any]]) -> List[DriverRecord]:
    """
    Normalize one analysis's drivers and place them on the map.

    Coordinates are assigned in the order of `entries` with a fresh
    CoordinateAssigner, so placements never leak between analyses.

    Args:
        entries: Ordered (id, raw entry) pairs, e.g. from report_entries().

    Returns:
        DriverRecords with coordinates, in input order, dropped entries omitted.
    """
    assigner = CoordinateAssigner()
    records: List[DriverRecord] = []

    for driver_id, value in entries:
        record = normalize_driver(driver_id, value)
        if record is None:
            continue
        coordinates = assigner.assign(record.regions)
        records.append(record.model_copy(update={'coordinates': coordinates}))

    logger.debug(f"Normalized {len(records)} of {len(entries)} driver entries")
    return records
