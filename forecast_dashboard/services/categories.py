"""
Category Aggregator - Driver Categories per Analysis and per Dataset

Collapses the categories referenced by drivers-report entries into the
category lists shown by the drivers comparison panel.

Entry Points:
- analysis_category_importance: categoryId -> CategoryImportance for one
  analysis. Entries need a numeric category id and an importance > 0. When
  an id appears more than once the last entry wins (map semantics, not a
  max/merge).
- count_drivers_by_category: categoryId -> number of entries of one analysis,
  regardless of importance.
- dataset_categories: union of (id, name) pairs over every analysis of a
  dataset, sorted by id, name from the last analysis that supplied it.
- merge_categories_with_counts: the dataset-wide list overlaid with one
  analysis's importance and counts. Categories the analysis never mentions
  stay in the list with importance 0 and driverCount 0, so the panel has the
  same shape for every analysis of a dataset.

Importance of an entry is the report's `importance.overall.mean` score when
it is positive, otherwise the correlation-derived 0-100 importance, rounded
half up to a whole percent.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from forecast_dashboard.models.schemas import (
    CategoryImportance,
    CategorySummary,
    CategoryWithCount,
    DriversReportSummary,
)
from forecast_dashboard.services.driver_records import (
    RawDriverEntry,
    importance_from_mean,
    parse_report,
    report_entries,
    resolve_correlation_mean,
    round_half_up,
)

logger = logging.getLogger(__name__)


CATEGORY_NAME_UNAVAILABLE: str = "Category Name Unavailable"


def entry_importance(entry: RawDriverEntry) -> int:
    """
    Whole-percent importance of one entry, in [0, 100].

    Prefers the report's own importance score and falls back to the
    correlation mean when that score is missing or not positive.
    """
    score = entry.importance_mean
    if score is None or score <= 0:
        score = importance_from_mean(resolve_correlation_mean(entry))
    return max(0, min(100, round_half_up(score)))


# =============================================================================
# Per-analysis aggregation
# =============================================================================

def discover_categories(entries: Iterable[Tuple[str, RawDriverEntry]]) -> Dict[int, str]:
    """
    categoryId -> name for every entry with both a numeric id and a name.

    Insertion order follows first appearance; a later entry overwrites the
    name of an id seen before.
    """
    categories: Dict[int, str] = {}
    for _, entry in entries:
        if entry.category.id is not None and entry.category.name is not None:
            categories[entry.category.id] = entry.category.name
    return categories


def analysis_category_importance(
    entries: Iterable[Tuple[str, RawDriverEntry]]
) -> Dict[int, CategoryImportance]:
    """
    Category importance map for one analysis.

    Args:
        entries: Parsed (id, entry) pairs of one drivers report, in order.

    Returns:
        Dict keyed by category id, ascending. Entries without a numeric id or
        with importance 0 are skipped; for repeated ids the last entry wins.
    """
    latest: Dict[int, CategoryImportance] = {}
    for _, entry in entries:
        category_id = entry.category.id
        if category_id is None:
            continue
        importance = entry_importance(entry)
        if importance <= 0:
            continue
        latest[category_id] = CategoryImportance(
            id=category_id,
            name=entry.category.name or "Unknown",
            importance=importance,
        )

    return {category_id: latest[category_id] for category_id in sorted(latest)}


def count_drivers_by_category(entries: Iterable[Tuple[str, RawDriverEntry]]) -> Dict[int, int]:
    """Number of entries per resolved category id, independent of importance."""
    counts: Dict[int, int] = {}
    for _, entry in entries:
        category_id = entry.category.id
        if category_id is not None:
            counts[category_id] = counts.get(category_id, 0) + 1
    return counts


# =============================================================================
# Dataset-wide aggregation
# =============================================================================

def dataset_categories(reports: Iterable[Any]) -> List[CategorySummary]:
    """
    Union of categories across all drivers reports of a dataset.

    Args:
        reports: Raw drivers reports, one per analysis, in analysis order.

    Returns:
        CategorySummary list sorted ascending by id; for an id found in
        several analyses, the name comes from the last one.
    """
    union: Dict[int, str] = {}
    for report in reports:
        union.update(discover_categories(parse_report(report)))

    return [
        CategorySummary(id=category_id, name=union[category_id])
        for category_id in sorted(union)
    ]


def merge_categories_with_counts(
    categories: Sequence[CategorySummary],
    importance: Dict[int, CategoryImportance],
    counts: Dict[int, int],
) -> List[CategoryWithCount]:
    """
    Overlay one analysis's importance and counts on the dataset-wide list.

    Every dataset category is returned, in the dataset list's order, with 0
    importance and 0 count where the analysis has no data for it.
    """
    merged: List[CategoryWithCount] = []
    for category in categories:
        analysis_entry = importance.get(category.id)
        merged.append(CategoryWithCount(
            id=category.id,
            name=category.name,
            importance=analysis_entry.importance if analysis_entry else 0,
            driverCount=counts.get(category.id, 0),
        ))
    return merged


def analysis_categories_view(report: Any, categories: Sequence[CategorySummary]) -> List[CategoryWithCount]:
    """Convenience wrapper: parse one report and merge it onto `categories`."""
    entries = parse_report(report)
    return merge_categories_with_counts(
        categories,
        analysis_category_importance(entries),
        count_drivers_by_category(entries),
    )


# =============================================================================
# Report summaries
# =============================================================================

def summarize_drivers_report(report: Any) -> DriversReportSummary:
    """Categories (sorted by id) and entry total of one drivers report."""
    discovered = discover_categories(parse_report(report))
    categories = [
        CategorySummary(id=category_id, name=discovered[category_id])
        for category_id in sorted(discovered)
    ]
    return DriversReportSummary(
        categories=categories,
        totalDrivers=len(report_entries(report)),
        categoriesCount=len(categories),
    )


def first_category_name(report: Any) -> str:
    """
    Name of the first entry whose category is an object with a name.

    Returns CATEGORY_NAME_UNAVAILABLE when no entry qualifies.
    """
    for _, value in report_entries(report):
        if not isinstance(value, dict):
            continue
        category = value.get('category')
        if isinstance(category, dict) and isinstance(category.get('name'), str) and category['name']:
            return category['name']
    return CATEGORY_NAME_UNAVAILABLE
