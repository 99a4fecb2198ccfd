"""
Pydantic request/response models for the forecast dashboard backend.

This module provides type-safe data validation and serialization for the JSON
contracts consumed by the dashboard UI: normalized driver records, category
aggregates, forecast extracts and table rows, historical points, news content,
link previews and the link validation report.

Field names are camelCase to keep the dashboard's existing JSON contract.

All models use Pydantic v2 syntax.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from forecast_dashboard.models.enums import ImpactDirection, NewsContentType


# =============================================================================
# Driver Models
# =============================================================================


class Coordinates(BaseModel):
    """
    Map position of a driver marker, in percent of the map's width and height.

    After collision adjustment both axes are kept inside [5, 95] so markers
    never touch the map edge.
    """
    model_config = ConfigDict(frozen=True)

    x: float = Field(..., ge=0, le=100, description="Horizontal position (0-100)")
    y: float = Field(..., ge=0, le=100, description="Vertical position (0-100)")
    continent: str = Field(..., description="Continent label of the resolved region")


class DriverRecord(BaseModel):
    """
    Canonical driver derived from one drivers-report entry.

    `importance` is |correlation mean| x 100; `direction` is the signed mean
    itself and drives the positive/negative impact label.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "drv_001",
                "name": "Housing Starts, United States",
                "regions": ["World", "United States of America"],
                "category": "Housing",
                "isPublic": True,
                "importance": 42.0,
                "direction": -0.42,
                "impact": "negative",
                "lag": "3 month(s)",
                "coordinates": {"x": 5.0, "y": 45.0, "continent": "North America"},
            }
        }
    )

    id: str = Field(..., description="Drivers-report key as read from the file")
    name: str = Field(..., min_length=1, description="Driver display name")
    regions: List[str] = Field(
        default_factory=lambda: ["World"],
        description="Region names, most specific last"
    )
    category: str = Field(default="Unknown", description="Category display name")
    isPublic: bool = Field(default=False, description="Whether the driver is public data")
    importance: float = Field(default=0.0, ge=0, le=100, description="Importance score (0-100)")
    direction: float = Field(default=0.0, description="Signed correlation mean")
    impact: ImpactDirection = Field(
        default=ImpactDirection.NEUTRAL,
        description="Impact label derived from the sign of direction"
    )
    lag: str = Field(default="Unknown", description="Lag label, e.g. '3 month(s)'")
    coordinates: Optional[Coordinates] = Field(
        default=None,
        description="Map coordinates; assigned per analysis batch"
    )
    normalizedSeries: Optional[Dict[str, Optional[float]]] = Field(
        default=None,
        description="Normalized driver series keyed by ISO date"
    )
    rawImportance: Optional[float] = Field(
        default=None,
        description="Report importance.overall.mean when present"
    )


# =============================================================================
# Category Models
# =============================================================================


class CategorySummary(BaseModel):
    """Category id/name pair as discovered in drivers reports."""
    id: int = Field(..., description="Category id, unique per dataset")
    name: str = Field(..., description="Category name")


class CategoryImportance(BaseModel):
    """Per-analysis category with its rounded importance percent."""
    id: int = Field(..., description="Category id")
    name: str = Field(..., description="Category name")
    importance: int = Field(default=0, ge=0, description="Rounded importance percent")


class CategoryWithCount(BaseModel):
    """
    Dataset-wide category overlaid with one analysis's importance and count.

    Categories not present in the analysis keep importance 0 and driverCount 0
    so every analysis of a dataset shows the same category set.
    """
    id: int = Field(..., description="Category id")
    name: str = Field(..., description="Category name")
    importance: int = Field(default=0, ge=0, description="Rounded importance percent")
    driverCount: int = Field(default=0, ge=0, description="Drivers of this category in the analysis")


class CategoryListResponse(BaseModel):
    """Response for the dataset-wide categories endpoint."""
    categories: List[CategorySummary] = Field(default_factory=list)
    totalCategories: int = Field(default=0, ge=0)


class AnalysisCategoryListResponse(BaseModel):
    """Response for the per-analysis merged categories endpoint."""
    categories: List[CategoryWithCount] = Field(default_factory=list)
    totalCategories: int = Field(default=0, ge=0)


class DriversReportSummary(BaseModel):
    """Response for the drivers-report endpoint."""
    categories: List[CategorySummary] = Field(default_factory=list)
    totalDrivers: int = Field(default=0, ge=0, description="Number of entries in the report")
    categoriesCount: int = Field(default=0, ge=0)


class DriverNameResponse(BaseModel):
    """Category name of the first categorized driver of a report."""
    categoryName: str


# =============================================================================
# Dataset / Analysis Models
# =============================================================================


class DatasetFolder(BaseModel):
    """Dataset folder entry for the sidebar."""
    title: str = Field(..., description="Dataset folder name")
    url: str = Field(..., description="Anchor URL for the sidebar")
    icon: str = Field(default="folder")
    files: List[str] = Field(default_factory=list, description="CSV files in the folder")


class AnalysisInfo(BaseModel):
    """One analysis run of a dataset."""
    id: str = Field(..., description="Analysis folder name")
    name: str = Field(..., description="Display name")
    path: str = Field(..., description="Dataset-relative analysis path")
    driverCount: int = Field(default=0, ge=0, description="Drivers kept by the normalizer")


# =============================================================================
# Forecast Models
# =============================================================================


class ForecastPoint(BaseModel):
    """
    One forecast date with its point forecast and optional distribution.

    When both are present, explicit quantiles take precedence over values
    derived from samples.
    """
    date: str = Field(..., description="ISO date")
    forecast: float
    quantiles: Dict[str, float] = Field(
        default_factory=dict,
        description="Quantile label (e.g. '0.1') to value"
    )
    samples: List[float] = Field(default_factory=list, description="Posterior samples")


class ForecastSeries(BaseModel):
    """Parallel date/value arrays of one analysis, date-ascending."""
    dates: List[str] = Field(default_factory=list)
    forecastValues: List[float] = Field(default_factory=list)


class ForecastExtract(BaseModel):
    """Forecast document flattened for the chart and table."""
    forecastValues: List[float] = Field(default_factory=list)
    dates: List[str] = Field(default_factory=list)
    allQuantiles: Dict[str, List[Optional[float]]] = Field(
        default_factory=dict,
        description="Quantile label to values parallel to dates"
    )
    sortedQuantileKeys: List[str] = Field(default_factory=list)
    allSamples: Dict[str, List[float]] = Field(
        default_factory=dict,
        description="Ascending samples keyed by date"
    )
    totalPoints: int = Field(default=0, ge=0)


class ForecastTableRow(BaseModel):
    """Row of the forecast table with the selected confidence columns."""
    id: str
    date: str
    forecast: float
    lower: Optional[float] = None
    upper: Optional[float] = None
    analysisId: str


class ForecastTablePage(BaseModel):
    """One page of forecast table rows."""
    rows: List[ForecastTableRow] = Field(default_factory=list)
    pageIndex: int = Field(default=0, ge=0)
    pageSize: int = Field(default=10, ge=1)
    pageCount: int = Field(default=0, ge=0)
    totalRows: int = Field(default=0, ge=0)
    lowerLabel: Optional[str] = None
    upperLabel: Optional[str] = None


class HistoricalPoint(BaseModel):
    """One row of a historical series CSV."""
    date: str
    historical: float


# =============================================================================
# News Models
# =============================================================================


class NewsItem(BaseModel):
    """News article shown on a summary card."""
    favicon: str = ""
    outlet: str = ""
    title: str = ""
    link: str = ""
    date: str = ""
    image: str = ""


class NewsContent(BaseModel):
    """Summary card content for a month or the future outlook."""
    title: str
    summary: str
    news: List[NewsItem] = Field(default_factory=list)
    type: NewsContentType


# =============================================================================
# Link Preview / Validation Models
# =============================================================================


class LinkPreview(BaseModel):
    """Open Graph style preview of an external page."""
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class NewsLink(BaseModel):
    """A news link found in a dataset's news document."""
    url: str
    dataset: str
    month: str
    outlet: Optional[str] = None
    title: Optional[str] = None
    index: int = 0


class LinkCheckResult(BaseModel):
    """Outcome of one HEAD request."""
    url: str
    status: int = Field(default=0, description="HTTP status, 0 on network failure")
    statusText: str = ""
    success: bool = False
    error: Optional[str] = None


class DatasetLinkStats(BaseModel):
    """Per-dataset link totals."""
    total: int = 0
    failed: int = 0


class ValidationReport(BaseModel):
    """Summary of a news link validation run."""
    total: int = 0
    successful: int = 0
    failed: int = 0
    successRate: float = 0.0
    byDataset: Dict[str, DatasetLinkStats] = Field(default_factory=dict)
    statusCodes: Dict[int, int] = Field(default_factory=dict)
    failures: List[LinkCheckResult] = Field(default_factory=list)
