"""
Package initialization file for forecast dashboard models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py so
other modules can import them from forecast_dashboard.models directly.

Usage:
    from forecast_dashboard.models import DriverRecord, CategoryWithCount
"""

# =============================================================================
# Enums
# =============================================================================

from forecast_dashboard.models.enums import (
    Continent,
    ImpactDirection,
    NewsContentType,
    TimeRange,
)

# =============================================================================
# Schemas
# =============================================================================

from forecast_dashboard.models.schemas import (
    # Drivers
    Coordinates,
    DriverRecord,
    # Categories
    CategorySummary,
    CategoryImportance,
    CategoryWithCount,
    CategoryListResponse,
    AnalysisCategoryListResponse,
    DriversReportSummary,
    DriverNameResponse,
    # Datasets / analyses
    DatasetFolder,
    AnalysisInfo,
    # Forecasts
    ForecastPoint,
    ForecastSeries,
    ForecastExtract,
    ForecastTableRow,
    ForecastTablePage,
    HistoricalPoint,
    # News
    NewsItem,
    NewsContent,
    # Link preview / validation
    LinkPreview,
    NewsLink,
    LinkCheckResult,
    DatasetLinkStats,
    ValidationReport,
)


__all__ = [
    'Continent',
    'ImpactDirection',
    'NewsContentType',
    'TimeRange',
    'Coordinates',
    'DriverRecord',
    'CategorySummary',
    'CategoryImportance',
    'CategoryWithCount',
    'CategoryListResponse',
    'AnalysisCategoryListResponse',
    'DriversReportSummary',
    'DriverNameResponse',
    'DatasetFolder',
    'AnalysisInfo',
    'ForecastPoint',
    'ForecastSeries',
    'ForecastExtract',
    'ForecastTableRow',
    'ForecastTablePage',
    'HistoricalPoint',
    'NewsItem',
    'NewsContent',
    'LinkPreview',
    'NewsLink',
    'LinkCheckResult',
    'DatasetLinkStats',
    'ValidationReport',
]
