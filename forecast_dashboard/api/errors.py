"""
Translation of data store errors into HTTP errors.

Missing datasets, analyses and files become 404 responses; unreadable files
become 500 responses. Both are logged before they are raised.
"""

import logging

from fastapi import HTTPException

from forecast_dashboard.core.datastore import DataFileFormatError, DataStoreError

logger = logging.getLogger(__name__)


def http_error_from_store(error: DataStoreError, action: str) -> HTTPException:
    """
    HTTPException for a data store failure.

    Args:
        error: The error raised by the DataStore.
        action: What the handler was doing, e.g. "reading forecast data".
    """
    if isinstance(error, DataFileFormatError):
        logger.error(f"Error {action}: {error}", exc_info=True)
        return HTTPException(status_code=500, detail=f"Failed {action}")
    logger.warning(f"Error {action}: {error}")
    return HTTPException(status_code=404, detail=str(error))
