"""
FastAPI dependency injection module for the forecast dashboard.

Route handlers receive their collaborators through these dependencies instead
of building them inline, so tests can call a handler with explicit arguments
or override a dependency on the app.

Dependencies Provided:
- get_settings_dependency / SettingsDep: the cached Settings instance
- get_data_store / DataStoreDep: a DataStore rooted at settings.data_root
- get_link_preview_cache / LinkPreviewCacheDep: the app-owned preview cache

Usage Examples:
    @router.get("/data-folders")
    async def list_data_folders(store: DataStoreDep) -> List[DatasetFolder]:
        return store.list_datasets()
"""

from typing import Annotated

from fastapi import Depends, Request

from forecast_dashboard.core.config import Settings, get_settings
from forecast_dashboard.core.datastore import DataStore
from forecast_dashboard.services.link_preview import LinkPreviewCache


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Data Store Dependency
# =============================================================================

def get_data_store(settings: SettingsDep) -> DataStore:
    """DataStore for the configured data root."""
    return DataStore.from_settings(settings)


DataStoreDep = Annotated[DataStore, Depends(get_data_store)]


# =============================================================================
# Link Preview Cache Dependency
# =============================================================================

def get_link_preview_cache(request: Request) -> LinkPreviewCache:
    """
    The LinkPreviewCache created by the application lifespan.

    Falls back to creating one on first use when the app was started without
    the lifespan (e.g. mounted as a sub-application).
    """
    cache = getattr(request.app.state, 'link_preview_cache', None)
    if cache is None:
        settings = get_settings()
        cache = LinkPreviewCache(
            ttl_seconds=settings.link_preview_cache_ttl_seconds,
            max_entries=settings.link_preview_cache_max_entries,
        )
        request.app.state.link_preview_cache = cache
    return cache


LinkPreviewCacheDep = Annotated[LinkPreviewCache, Depends(get_link_preview_cache)]
