"""Exception handlers for the admin API."""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from libs.catalog import CatalogError, ErrorKind

from .exceptions import OrderError, OrderNotFoundError, OrderRefundError

logger = logging.getLogger(__name__)

CATALOG_STATUS_CODES = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BOUNDARY_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.STALE_SNAPSHOT: status.HTTP_409_CONFLICT,
    ErrorKind.PARTIAL_REORDER_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.TRANSIENT_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Handle catalog errors, telling the caller whether to retry or reload."""
    status_code = CATALOG_STATUS_CODES.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"Catalog error: kind={exc.kind.value}, error={str(exc)}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "kind": exc.kind.value, "recovery": exc.recovery.value},
    )


async def order_error_handler(request: Request, exc: OrderError) -> JSONResponse:
    """Handle order administration errors."""
    if isinstance(exc, OrderNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})
    if isinstance(exc, OrderRefundError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})
    logger.error(f"Order error: order_id={exc.order_id}, error={str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors."""
    error_msg = str(exc)
    error_type = type(exc).__name__

    logger.error(
        f"Database error: error_type={error_type}, error={error_msg}",
        exc_info=True,
    )

    if isinstance(exc, IntegrityError):
        if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={"detail": "Resource already exists"},
            )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Database constraint violation"},
        )

    if "connection" in error_msg.lower() or "connect" in error_msg.lower():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database connection issue"},
        )

    if "relation" in error_msg.lower() or "no such table" in error_msg.lower() or "does not exist" in error_msg.lower():
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Table or relation does not exist (migrations may be needed)"},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Database error occurred: {error_type}"},
    )
