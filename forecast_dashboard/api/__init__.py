"""
Forecast dashboard API package initialization.

This package contains the FastAPI router modules:
- datasets: dataset folders, analyses, categories, historical/combined series, news
- analyses: per-analysis categories, drivers, forecast and scenario
- link_preview: cached previews of news links
"""

from fastapi import APIRouter

# Import router modules
from forecast_dashboard.api.datasets import router as datasets_router
from forecast_dashboard.api.analyses import router as analyses_router
from forecast_dashboard.api.link_preview import router as link_preview_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(datasets_router, tags=["datasets"])
api_router.include_router(analyses_router, tags=["analyses"])  # analyses router has its own prefix
api_router.include_router(link_preview_router, tags=["link-preview"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "datasets_router",
    "analyses_router",
    "link_preview_router",
]
