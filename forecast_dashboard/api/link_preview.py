"""
FastAPI router module for link previews of news articles.

GET /link-preview?url=... returns {url, title, description, image}. Fetch
failures are not errors: the response is the URL with empty metadata. Only a
missing or non-http(s) URL is rejected with 400.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from forecast_dashboard.core.dependencies import LinkPreviewCacheDep, SettingsDep
from forecast_dashboard.models.schemas import LinkPreview
from forecast_dashboard.services.link_preview import fetch_link_preview, is_valid_url


logger = logging.getLogger(__name__)


router = APIRouter()


@router.get("/link-preview", response_model=LinkPreview)
async def get_link_preview(
    settings: SettingsDep,
    cache: LinkPreviewCacheDep,
    url: Annotated[Optional[str], Query(description="Page to preview")] = None,
) -> LinkPreview:
    """
    Open Graph preview of an external page, cached per URL.

    Raises:
        HTTPException: 400 when url is missing or not an absolute http(s) URL.
    """
    if not url:
        raise HTTPException(status_code=400, detail="URL parameter is required")
    if not is_valid_url(url):
        raise HTTPException(status_code=400, detail="URL must be an absolute http(s) URL")

    # requests is blocking; keep it off the event loop
    return await run_in_threadpool(
        fetch_link_preview,
        url,
        cache,
        settings.link_preview_timeout_seconds,
    )
