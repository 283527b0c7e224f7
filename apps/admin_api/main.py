from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from libs.catalog import CatalogError
from libs.common import configure_logging, get_settings
from libs.common.events import EVENT_CATALOG_DIVERGED, Event, get_activity_journal, get_event_bus
from libs.common.logging import set_correlation_id
from libs.data.database import get_session_factory

from .exception_handlers import catalog_error_handler, database_error_handler, order_error_handler
from .exceptions import OrderError
from .routes import router as admin_router

logger = logging.getLogger(__name__)


async def _log_divergence(event: Event) -> None:
    logger.warning(
        "Catalog order diverged: product %s moved without neighbour %s; a reload is required",
        event.payload.get("item_id"),
        event.payload.get("neighbor_id"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    bus = get_event_bus()
    await bus.subscribe(EVENT_CATALOG_DIVERGED, _log_divergence)
    await get_activity_journal().attach(bus)
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
            logger.info("Database connection verified successfully")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}", exc_info=True)
        logger.warning("Application will start but database operations may fail")

    yield

    await get_activity_journal().detach(bus)
    await bus.unsubscribe(EVENT_CATALOG_DIVERGED, _log_divergence)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="Storefront Admin API", version="0.1.0", lifespan=lifespan)

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(OrderError, order_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    app.include_router(admin_router, prefix="/admin", tags=["admin"])

    @app.middleware("http")
    async def tracing_middleware(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-Id", str(uuid.uuid4()))
        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id
        response: Response = await call_next(request)
        response.headers["X-Correlation-Id"] = correlation_id
        return response

    @app.get("/healthz", tags=["system"])
    async def health():
        """Health check endpoint that verifies database connectivity."""
        db_status = "ok"
        try:
            async with get_session_factory()() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"error: {str(e)}"

        return {
            "status": "ok" if db_status == "ok" else "degraded",
            "database": db_status,
        }

    return app


app = create_app()


def run():
    import os
    import uvicorn

    port = int(os.environ.get("PORT", 8100))
    reload = os.environ.get("APP_ENV", "").lower() == "local"
    uvicorn.run("apps.admin_api.main:app", host="0.0.0.0", port=port, reload=reload)


if __name__ == "__main__":
    run()
