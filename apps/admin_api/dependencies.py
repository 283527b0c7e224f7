from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from libs.catalog import OrderedCatalog, ReorderMode, SqlCatalogStore
from libs.common import AppSettings, get_settings
from libs.common.events import ActivityJournal, EventBus, get_activity_journal, get_event_bus
from libs.common.notifications import NotificationCenter, get_notification_center
from libs.data.database import get_session_factory


async def get_settings_dep() -> AppSettings:
    return get_settings()


def get_session_factory_dep() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


async def get_session_dep(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory_dep),
) -> AsyncIterator[AsyncSession]:
    """Dependency that provides database session."""
    async with factory() as session:
        yield session


def get_notifications() -> NotificationCenter:
    return get_notification_center()


def get_events() -> EventBus:
    return get_event_bus()


def get_activity() -> ActivityJournal:
    return get_activity_journal()


def get_catalog(
    settings: AppSettings = Depends(get_settings_dep),
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory_dep),
    notifications: NotificationCenter = Depends(get_notifications),
    event_bus: EventBus = Depends(get_events),
) -> OrderedCatalog:
    return OrderedCatalog(
        SqlCatalogStore(factory),
        mode=ReorderMode(settings.catalog_reorder_mode),
        verify_revision=settings.catalog_verify_revision,
        notifications=notifications,
        event_bus=event_bus,
    )
