"""
Quantile/Sample Engine - Distribution Queries over Forecast Samples

Answers the two inverse questions the forecast table and chart ask about a
forecast point's posterior samples, and reconciles explicit quantile maps with
sample-derived values.

Operations:
- value_at_quantile(samples, q): nearest-rank lookup at
  index round((len - 1) * q / 100) on the samples as given. No sorting is
  done here; callers that hold unsorted samples must sort first (the forecast
  extractor does).
- quantile_at_value(samples, target): sorts a copy, finds the sample closest
  to target (first one on ties) and returns round(100 * index / (len - 1)).
- find_closest_quantile(target, labels): label whose numeric value is closest
  to target, used when switching between analyses with different quantile sets.
- resolve_quantile / merge_quantiles: explicit quantile values first, samples
  as the fallback.

Rounding is half-up throughout. Empty input never raises: value lookups return
None and quantile_at_value returns 0.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from forecast_dashboard.services.driver_records import as_number, round_half_up

logger = logging.getLogger(__name__)


def quantile_label(level: float) -> str:
    """
    Label of a percent level, e.g. 5 -> "0.05", 50 -> "0.5".

    Matches the labels used as keys of quantile_forecast maps.
    """
    return format(level / 100.0, "g")


def parse_quantile_label(label: Any) -> Optional[float]:
    """Fractional value of a quantile label, or None when it is not numeric."""
    try:
        value = float(label)
    except (TypeError, ValueError):
        return None
    if np.isnan(value) or np.isinf(value):
        return None
    return value


def value_at_quantile(samples: Sequence[float], q: float) -> Optional[float]:
    """
    Nearest-rank value at percent level q (0-100) on the given order.

    Args:
        samples: Samples positioned by rank (sorted ascending by the caller).
        q: Percent level; clamped to [0, 100].

    Returns:
        The sample at index round((len - 1) * q / 100), or None when empty.

    Example:
        >>> value_at_quantile([10, 20, 30, 40, 50], 50)
        30.0
    """
    if len(samples) == 0:
        return None
    q = max(0.0, min(100.0, float(q)))
    index = round_half_up((len(samples) - 1) * q / 100.0)
    return float(samples[index])


def quantile_at_value(samples: Sequence[float], target: float) -> int:
    """
    Percent level (0-100) at which `target` sits within `samples`.

    Sorts a copy ascending and takes the element with the smallest absolute
    distance to target; on ties the lowest index wins.

    Edge Cases:
        - Empty samples: 0
        - Single sample: 0 (there is only one rank)
    """
    if len(samples) == 0:
        return 0
    if len(samples) == 1:
        return 0

    ordered = np.sort(np.asarray(samples, dtype=np.float64))
    # argmin returns the first minimal element
    index = int(np.argmin(np.abs(ordered - float(target))))
    return round_half_up(100.0 * index / (len(ordered) - 1))


def find_closest_quantile(target: Any, available_labels: Sequence[str]) -> Optional[str]:
    """
    Label from available_labels numerically closest to target.

    Args:
        target: Desired label (e.g. "0.1") or its numeric value.
        available_labels: Labels offered by the current analysis.

    Returns:
        The closest label (first on ties), the target itself when it is
        available, or None when no label is numeric.
    """
    if target in available_labels:
        return target

    target_value = parse_quantile_label(target)
    best_label: Optional[str] = None
    best_distance = float('inf')

    for label in available_labels:
        value = parse_quantile_label(label)
        if value is None:
            continue
        if target_value is None:
            return label
        distance = abs(value - target_value)
        if distance < best_distance:
            best_label, best_distance = label, distance

    return best_label


def resolve_quantile(
    quantiles: Optional[Mapping[str, Any]],
    samples: Optional[Sequence[float]],
    label: str,
) -> Optional[float]:
    """
    Value of one quantile label for a forecast point.

    The explicit quantile map wins when it holds a number for `label`;
    otherwise the value is read from the ascending-sorted samples at
    float(label) * 100. None when neither source can answer.
    """
    if quantiles:
        explicit = as_number(quantiles.get(label))
        if explicit is not None:
            return explicit

    level = parse_quantile_label(label)
    if not samples or level is None:
        return None
    return value_at_quantile(sorted(samples), level * 100.0)


def merge_quantiles(
    quantiles: Optional[Mapping[str, Any]],
    samples: Optional[Sequence[float]],
    labels: Sequence[str],
) -> Dict[str, float]:
    """
    Label -> value for every requested label that can be resolved.

    Explicit values take precedence; samples only fill labels the explicit
    map lacks. Explicit labels not requested are kept as well.
    """
    merged: Dict[str, float] = {}
    if quantiles:
        for label, value in quantiles.items():
            number = as_number(value)
            if number is not None:
                merged[str(label)] = number

    for label in labels:
        if label in merged:
            continue
        value = resolve_quantile(None, samples, label)
        if value is not None:
            merged[label] = value

    return dict(sorted(merged.items(), key=lambda item: parse_quantile_label(item[0]) or 0.0))
