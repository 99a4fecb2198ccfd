"""
FastAPI router module for analysis-level endpoints.

All routes live under /data-folders/{dataset}/analyses/{analysis}:
- /categories: dataset-wide categories with this analysis's importance/counts
- /drivers-report: category summary and driver total of the drivers report
- /drivers: normalized drivers with map coordinates
- /driver-name: category name of the first categorized driver
- /forecast: extracted forecast document
- /forecast-table: paginated forecast rows with confidence columns
- /scenario: raw scenario document
"""

import logging
from typing import Annotated, Any, List, Optional

from fastapi import APIRouter, HTTPException, Query

from forecast_dashboard.core.datastore import DataStoreError
from forecast_dashboard.core.dependencies import DataStoreDep
from forecast_dashboard.api.datasets import load_dataset_reports
from forecast_dashboard.api.errors import http_error_from_store
from forecast_dashboard.models.schemas import (
    AnalysisCategoryListResponse,
    DriverNameResponse,
    DriverRecord,
    DriversReportSummary,
    ForecastExtract,
    ForecastTablePage,
)
from forecast_dashboard.services.categories import (
    analysis_categories_view,
    dataset_categories,
    first_category_name,
    summarize_drivers_report,
)
from forecast_dashboard.services.driver_records import build_driver_records, report_entries
from forecast_dashboard.services.forecast import (
    DEFAULT_PAGE_SIZE,
    build_forecast_rows,
    extract_forecast,
    paginate,
)


# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter(prefix="/data-folders/{dataset}/analyses/{analysis}")


# =============================================================================
# Drivers Endpoints
# =============================================================================


@router.get("/categories", response_model=AnalysisCategoryListResponse)
async def get_analysis_categories(
    dataset: str,
    analysis: str,
    store: DataStoreDep,
) -> AnalysisCategoryListResponse:
    """
    Every category of the dataset with this analysis's importance and count.

    Categories the analysis does not use are returned with importance 0 and
    driverCount 0, so all analyses of a dataset list the same categories.
    """
    try:
        report = store.read_drivers_report(dataset, analysis)
        categories = dataset_categories(load_dataset_reports(store, dataset))
        merged = analysis_categories_view(report, categories)
        return AnalysisCategoryListResponse(categories=merged, totalCategories=len(merged))

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading analysis categories") from e


@router.get("/drivers-report", response_model=DriversReportSummary)
async def get_drivers_report(dataset: str, analysis: str, store: DataStoreDep) -> DriversReportSummary:
    """Categories and total driver count of one drivers report."""
    try:
        return summarize_drivers_report(store.read_drivers_report(dataset, analysis))

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading drivers report") from e


@router.get("/drivers", response_model=List[DriverRecord])
async def get_drivers(dataset: str, analysis: str, store: DataStoreDep) -> List[DriverRecord]:
    """
    Normalized drivers of one analysis, placed on the world map.

    Placement follows the report's key order and is computed fresh for every
    request.
    """
    try:
        report = store.read_drivers_report(dataset, analysis)
        records = build_driver_records(report_entries(report))
        logger.info(f"Normalized {len(records)} drivers for {dataset}/{analysis}")
        return records

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading drivers") from e


@router.get("/driver-name", response_model=DriverNameResponse)
async def get_driver_name(dataset: str, analysis: str, store: DataStoreDep) -> DriverNameResponse:
    """Category name of the first driver whose category is a named object."""
    try:
        report = store.read_drivers_report(dataset, analysis)
        return DriverNameResponse(categoryName=first_category_name(report))

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading driver name") from e


# =============================================================================
# Forecast Endpoints
# =============================================================================


@router.get("/forecast", response_model=ForecastExtract)
async def get_forecast(dataset: str, analysis: str, store: DataStoreDep) -> ForecastExtract:
    """
    Forecast values, dates and quantile columns of one analysis.

    Quantiles are computed from samples at the configured levels for points
    without explicit quantile values.
    """
    try:
        document = store.read_forecast(dataset, analysis)
        return extract_forecast(document, store.settings.default_quantile_levels)

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading forecast data") from e


@router.get("/forecast-table", response_model=ForecastTablePage)
async def get_forecast_table(
    dataset: str,
    analysis: str,
    store: DataStoreDep,
    lower: Annotated[Optional[str], Query(description="Lower quantile label, e.g. '0.05'")] = None,
    upper: Annotated[Optional[str], Query(description="Upper quantile label, e.g. '0.95'")] = None,
    page: Annotated[int, Query(ge=0, description="Zero-based page index")] = 0,
    page_size: Annotated[int, Query(alias="pageSize", ge=1, le=500)] = DEFAULT_PAGE_SIZE,
) -> ForecastTablePage:
    """
    One page of the forecast table.

    Quantile labels the analysis does not offer are replaced by the closest
    available label; the labels used are returned with the page.
    """
    try:
        document = store.read_forecast(dataset, analysis)
        extract = extract_forecast(document, store.settings.default_quantile_levels)
        rows, lower_label, upper_label = build_forecast_rows(analysis, extract, lower, upper)
        return paginate(rows, page, page_size, lower_label, upper_label)

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading forecast table") from e


@router.get("/scenario")
async def get_scenario(dataset: str, analysis: str, store: DataStoreDep) -> Any:
    """Raw scenario document of one analysis."""
    try:
        return store.read_scenario(dataset, analysis)

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading scenario data") from e
