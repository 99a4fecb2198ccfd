"""
Settings and environment management module for the forecast dashboard backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for local development against ./public/data
- Singleton pattern via @lru_cache for efficient access

Environment Variables:
- DATA_ROOT: Root directory of the dataset tree (default: public/data)
- ANALYSES_DIRNAME: Per-dataset folder holding analysis runs (default: Analyses)
- DRIVERS_REPORT_PATH: Drivers report location inside an analysis folder
- LINK_PREVIEW_CACHE_TTL_SECONDS: Link preview cache lifetime (default: 300)
- LOG_LEVEL: Root logging level (default: INFO)

Usage:
    from forecast_dashboard.core.config import get_settings

    settings = get_settings()
    data_root = settings.data_root
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        data_root: Root directory containing one folder per dataset.
        analyses_dirname: Name of the folder holding analysis runs in a dataset.
        drivers_report_path: Drivers report path relative to an analysis folder.
        forecast_filename: Forecast document filename inside an analysis folder.
        scenario_filename: Scenario document filename inside an analysis folder.
        news_filename: News document filename inside a dataset folder.
        default_quantile_levels: Percent levels computed from forecast samples
            when a point carries no explicit quantile_forecast.
        link_preview_cache_ttl_seconds: Lifetime of cached link previews.
        link_preview_cache_max_entries: Upper bound on cached link previews.
        link_preview_timeout_seconds: HTTP timeout for link preview fetches.
        link_validation_timeout_seconds: HTTP timeout for HEAD link checks.
        link_validation_max_concurrent: Batch size for concurrent link checks.
        link_validation_batch_delay_seconds: Pause between link check batches.
        cors_origins: Origins allowed by the CORS middleware.
        log_level: Root logging level.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Dataset Tree Layout
    # =========================================================================

    data_root: str = 'public/data'
    analyses_dirname: str = 'Analyses'
    drivers_report_path: str = 'overwrite/drivers_report.json'
    forecast_filename: str = 'forecast.json'
    scenario_filename: str = 'scenario.json'
    news_filename: str = 'news.json'

    # =========================================================================
    # Forecast Extraction
    # =========================================================================

    # Matches the percentile columns offered by the forecast table
    default_quantile_levels: List[int] = [5, 15, 25, 50, 75, 85, 95]

    # =========================================================================
    # Link Preview / Link Validation
    # =========================================================================

    link_preview_cache_ttl_seconds: int = 300
    link_preview_cache_max_entries: int = 1000
    link_preview_timeout_seconds: float = 15.0

    link_validation_timeout_seconds: float = 10.0
    link_validation_max_concurrent: int = 5
    link_validation_batch_delay_seconds: float = 1.0

    # =========================================================================
    # HTTP / Logging
    # =========================================================================

    cors_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]
    log_level: str = 'INFO'


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The application settings instance with all configuration values.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
