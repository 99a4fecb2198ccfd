"""
FastAPI application entry point for the Forecast Dashboard API.

Configures logging and CORS, owns the link preview cache for the lifetime of
the app, registers the API routers and starts the ASGI server when run
directly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forecast_dashboard import __version__
from forecast_dashboard.api import api_router
from forecast_dashboard.core.config import get_settings
from forecast_dashboard.services.link_preview import LinkPreviewCache


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for application startup and shutdown.

    On startup:
        - Create the link preview cache
        - Log the data root being served
    On shutdown:
        - Drop cached previews
    """
    # Startup
    logger.info("Forecast Dashboard API starting")
    app.state.link_preview_cache = LinkPreviewCache(
        ttl_seconds=settings.link_preview_cache_ttl_seconds,
        max_entries=settings.link_preview_cache_max_entries,
    )
    logger.info(f"Serving datasets from {settings.data_root}")

    yield

    # Shutdown
    logger.info("Forecast Dashboard API shutting down")
    app.state.link_preview_cache.clear()


# Create FastAPI application
app = FastAPI(
    title="Forecast Dashboard API",
    version=__version__,
    description=(
        "FastAPI backend for the forecast dashboard. "
        "Provides dataset listings, normalized drivers, category aggregates, "
        "forecasts, combined chart series, news content and link previews."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer health checks.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Forecast Dashboard API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "forecast_dashboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
