"""
FastAPI router module for dataset-level endpoints.

Implements:
- GET /data-folders: dataset folders with their CSV files
- GET /data-folders/{dataset}/analyses: analysis runs with driver counts
- GET /data-folders/{dataset}/categories: category union across analyses
- GET /data-folders/{dataset}/historical: historical series in a time range
- GET /data-folders/{dataset}/combined-series: historical + forecast chart series
- GET /data-folders/{dataset}/news: summary card content

Handlers only read files through the DataStore and pass the parsed documents
to the services. Missing folders/files map to 404, unreadable files to 500.
"""

import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from forecast_dashboard.core.datastore import (
    DataFileNotFoundError,
    DataStore,
    DataStoreError,
)
from forecast_dashboard.core.dependencies import DataStoreDep
from forecast_dashboard.api.errors import http_error_from_store
from forecast_dashboard.models.schemas import (
    AnalysisInfo,
    CategoryListResponse,
    DatasetFolder,
    ForecastExtract,
    HistoricalPoint,
    NewsContent,
)
from forecast_dashboard.services.categories import dataset_categories
from forecast_dashboard.services.driver_records import normalize_driver, report_entries
from forecast_dashboard.services.forecast import extract_forecast
from forecast_dashboard.services.news import select_news_content
from forecast_dashboard.services.time_series import (
    build_forecast_inputs,
    combine_series,
    filter_time_range,
    parse_historical_csv,
)


# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


# =============================================================================
# Helpers
# =============================================================================

def count_kept_drivers(report: Any) -> int:
    """Number of report entries the normalizer keeps."""
    return sum(
        1 for driver_id, value in report_entries(report)
        if normalize_driver(driver_id, value) is not None
    )


def load_dataset_reports(store: DataStore, dataset: str) -> List[Any]:
    """
    Drivers reports of every analysis of a dataset, in analysis order.

    Analyses whose report is missing or unreadable are skipped.
    """
    reports = []
    for analysis_id in store.list_analysis_ids(dataset):
        try:
            reports.append(store.read_drivers_report(dataset, analysis_id))
        except DataStoreError as e:
            logger.info(f"Skipping analysis {analysis_id}: {e}")
    return reports


def load_historical(store: DataStore, dataset: str, filename: Optional[str] = None) -> List[HistoricalPoint]:
    """Historical points of a dataset; empty when the dataset has no CSV."""
    try:
        text = store.read_historical_csv(dataset, filename)
    except DataFileNotFoundError as e:
        if filename is not None:
            raise
        logger.info(f"No historical series for dataset {dataset}: {e}")
        return []
    return parse_historical_csv(text)


# =============================================================================
# Endpoint Implementations
# =============================================================================


@router.get("/data-folders", response_model=List[DatasetFolder])
async def list_data_folders(store: DataStoreDep) -> List[DatasetFolder]:
    """
    List dataset folders.

    Returns:
        One entry per dataset folder, sorted by name, with its CSV files.
    """
    folders = store.list_datasets()
    logger.info(f"Listed {len(folders)} dataset folders")
    return folders


@router.get("/data-folders/{dataset}/analyses", response_model=List[AnalysisInfo])
async def list_analyses(dataset: str, store: DataStoreDep) -> List[AnalysisInfo]:
    """
    List the analyses of a dataset.

    Returns an empty list when the dataset has no Analyses folder. The driver
    count is the number of drivers kept by the normalizer, 0 when the drivers
    report is missing or unreadable.
    """
    try:
        analyses = []
        for analysis_id in store.list_analysis_ids(dataset):
            try:
                driver_count = count_kept_drivers(store.read_drivers_report(dataset, analysis_id))
            except DataStoreError as e:
                logger.info(f"No driver count for analysis {analysis_id}: {e}")
                driver_count = 0

            analyses.append(AnalysisInfo(
                id=analysis_id,
                name=f"Analysis {analysis_id}",
                path=f"{dataset}/Analyses/{analysis_id}",
                driverCount=driver_count,
            ))
        return analyses

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading analyses directory") from e


@router.get("/data-folders/{dataset}/categories", response_model=CategoryListResponse)
async def get_dataset_categories(dataset: str, store: DataStoreDep) -> CategoryListResponse:
    """
    Union of the categories of every analysis of a dataset, sorted by id.
    """
    try:
        categories = dataset_categories(load_dataset_reports(store, dataset))
        return CategoryListResponse(categories=categories, totalCategories=len(categories))

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading dataset categories") from e


@router.get("/data-folders/{dataset}/historical", response_model=List[HistoricalPoint])
async def get_historical(
    dataset: str,
    store: DataStoreDep,
    time_range: Annotated[Optional[str], Query(alias="timeRange", description="6m, 1y, 3y, 5y or All")] = "All",
    reference_date: Annotated[Optional[str], Query(alias="referenceDate", description="End of the window")] = None,
    filename: Annotated[Optional[str], Query(alias="file", description="CSV file of the dataset")] = None,
) -> List[HistoricalPoint]:
    """
    Historical series of a dataset, limited to a time range.

    Args:
        time_range: Window length; unknown values mean one year.
        reference_date: Window end; defaults to the latest historical date.
        filename: CSV file to read; defaults to the first CSV of the dataset.
    """
    try:
        points = load_historical(store, dataset, filename)
        return filter_time_range(points, time_range, reference_date)

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading historical data") from e


@router.get("/data-folders/{dataset}/combined-series")
async def get_combined_series(
    dataset: str,
    store: DataStoreDep,
    analyses: Annotated[Optional[str], Query(description="Comma-separated analysis ids")] = None,
) -> List[Dict[str, Any]]:
    """
    Historical series combined with the forecasts of the selected analyses.

    Each point has a `date`, an optional `historical` value and one optional
    `forecast_<analysisId>` value per analysis. All analyses are used when
    none are selected; selected analyses without a forecast are skipped.
    """
    try:
        if analyses:
            analysis_ids = [a.strip() for a in analyses.split(',') if a.strip()]
        else:
            analysis_ids = store.list_analysis_ids(dataset)

        extracts: Dict[str, ForecastExtract] = {}
        for analysis_id in analysis_ids:
            try:
                document = store.read_forecast(dataset, analysis_id)
            except DataStoreError as e:
                logger.warning(f"Skipping forecast of analysis {analysis_id}: {e}")
                continue
            extracts[analysis_id] = extract_forecast(document, store.settings.default_quantile_levels)

        historical = load_historical(store, dataset)
        combined = combine_series(historical, build_forecast_inputs(extracts))
        logger.info(
            f"Combined {len(historical)} historical points with {len(extracts)} forecasts "
            f"into {len(combined)} points for dataset {dataset}"
        )
        return combined

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "combining series") from e


@router.get("/data-folders/{dataset}/news", response_model=Optional[NewsContent])
async def get_news(
    dataset: str,
    store: DataStoreDep,
    month: Annotated[Optional[str], Query(description="Month label, e.g. 'March 2025'")] = None,
    future_outlook: Annotated[bool, Query(alias="futureOutlook")] = True,
) -> Optional[NewsContent]:
    """
    Summary card content: the selected month, else the future outlook.

    Returns null when the dataset has no news file or no matching entry.
    """
    try:
        try:
            news = store.read_news(dataset)
        except DataFileNotFoundError:
            logger.info(f"No news file for dataset {dataset}")
            return None
        return select_news_content(news, month, future_outlook)

    except HTTPException:
        raise
    except DataStoreError as e:
        raise http_error_from_store(e, "reading news data") from e
