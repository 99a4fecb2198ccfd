"""
Core infrastructure package for the forecast dashboard.

Provides:
- Configuration management via pydantic-settings
- Read-only filesystem access to the dataset tree
- FastAPI dependency injection utilities

Re-exports the key components so other modules can write:

    from forecast_dashboard.core import get_settings, DataStore, DataStoreDep
"""

from forecast_dashboard.core.config import Settings, get_settings
from forecast_dashboard.core.datastore import (
    DataStore,
    DataStoreError,
    DatasetNotFoundError,
    AnalysisNotFoundError,
    DataFileNotFoundError,
    DataFileFormatError,
)
from forecast_dashboard.core.dependencies import (
    get_settings_dependency,
    get_data_store,
    get_link_preview_cache,
    SettingsDep,
    DataStoreDep,
    LinkPreviewCacheDep,
)


__all__ = [
    'Settings',
    'get_settings',
    'DataStore',
    'DataStoreError',
    'DatasetNotFoundError',
    'AnalysisNotFoundError',
    'DataFileNotFoundError',
    'DataFileFormatError',
    'get_settings_dependency',
    'get_data_store',
    'get_link_preview_cache',
    'SettingsDep',
    'DataStoreDep',
    'LinkPreviewCacheDep',
]
