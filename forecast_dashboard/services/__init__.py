"""
Forecast Dashboard Services Module

Pure transformation services: JSON documents in, UI-ready structures out.
None of them perform file I/O; the API layer reads files through the data
store and hands the parsed documents over.

Services:
- driver_records: raw drivers-report entries to canonical DriverRecords
- geo_coordinates: region names to collision-free map positions
- categories: per-analysis and dataset-wide category aggregation
- quantiles: quantile/sample distribution queries
- time_series: historical CSV parsing, time ranges, combined chart series
- forecast: forecast document extraction and the forecast table
- news: summary card content selection
- link_preview: cached Open Graph previews of news links
"""

# =============================================================================
# Driver Record Normalizer Exports
# =============================================================================

from forecast_dashboard.services.driver_records import (
    RawDriverEntry,
    CategoryRef,
    CorrelationStats,
    as_number,
    round_half_up,
    parse_raw_entry,
    parse_report,
    report_entries,
    normalize_driver,
    build_driver_records,
)

# =============================================================================
# Geo-Coordinate Assigner Exports
# =============================================================================

from forecast_dashboard.services.geo_coordinates import (
    CoordinateAssigner,
    REGION_COORDINATES,
    lookup_region,
)

# =============================================================================
# Category Aggregator Exports
# =============================================================================

from forecast_dashboard.services.categories import (
    CATEGORY_NAME_UNAVAILABLE,
    analysis_category_importance,
    count_drivers_by_category,
    dataset_categories,
    merge_categories_with_counts,
    analysis_categories_view,
    summarize_drivers_report,
    first_category_name,
)

# =============================================================================
# Quantile/Sample Engine Exports
# =============================================================================

from forecast_dashboard.services.quantiles import (
    quantile_label,
    value_at_quantile,
    quantile_at_value,
    find_closest_quantile,
    resolve_quantile,
    merge_quantiles,
)

# =============================================================================
# Time-Series Combiner Exports
# =============================================================================

from forecast_dashboard.services.time_series import (
    combine_series,
    build_forecast_inputs,
    parse_historical_csv,
    filter_time_range,
    month_label,
)

# =============================================================================
# Forecast Extraction, News and Link Preview Exports
# =============================================================================

from forecast_dashboard.services.forecast import (
    extract_forecast,
    to_forecast_points,
    build_forecast_rows,
    paginate,
)
from forecast_dashboard.services.news import select_news_content
from forecast_dashboard.services.link_preview import (
    LinkPreviewCache,
    extract_preview,
    fetch_link_preview,
)


__all__ = [
    # driver_records
    'RawDriverEntry',
    'CategoryRef',
    'CorrelationStats',
    'as_number',
    'round_half_up',
    'parse_raw_entry',
    'parse_report',
    'report_entries',
    'normalize_driver',
    'build_driver_records',
    # geo_coordinates
    'CoordinateAssigner',
    'REGION_COORDINATES',
    'lookup_region',
    # categories
    'CATEGORY_NAME_UNAVAILABLE',
    'analysis_category_importance',
    'count_drivers_by_category',
    'dataset_categories',
    'merge_categories_with_counts',
    'analysis_categories_view',
    'summarize_drivers_report',
    'first_category_name',
    # quantiles
    'quantile_label',
    'value_at_quantile',
    'quantile_at_value',
    'find_closest_quantile',
    'resolve_quantile',
    'merge_quantiles',
    # time_series
    'combine_series',
    'build_forecast_inputs',
    'parse_historical_csv',
    'filter_time_range',
    'month_label',
    # forecast
    'extract_forecast',
    'to_forecast_points',
    'build_forecast_rows',
    'paginate',
    # news
    'select_news_content',
    # link_preview
    'LinkPreviewCache',
    'extract_preview',
    'fetch_link_preview',
]
