"""Translate portal errors into HTTP errors for the API layer."""
import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from shared.domain.exceptions import NotFound, PermissionDenied, PortalError, StorageError

logger = logging.getLogger(__name__)


def to_http_exception(error: Exception) -> HTTPException:
    """Map a handler exception to the HTTP error shown to the operator."""
    if isinstance(error, PermissionDenied):
        return HTTPException(status_code=403, detail=error.message)
    if isinstance(error, NotFound):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, StorageError):
        return HTTPException(status_code=502, detail=error.message)
    if isinstance(error, PortalError):
        return HTTPException(status_code=400, detail=error.message)
    if isinstance(error, ValueError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, SQLAlchemyError):
        logger.error(f"Database error: {error}")
        return HTTPException(status_code=503, detail="Database unavailable, please try again")

    logger.error(f"Unhandled error: {error}")
    return HTTPException(status_code=500, detail="Internal server error")
