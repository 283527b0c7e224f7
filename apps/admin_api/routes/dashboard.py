from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Literal, TypeVar

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from libs.common.constants import SETTING_SHOP_NAME
from libs.common.events import ActivityJournal
from libs.common.notifications import NotificationCenter
from libs.data.repositories import SettingRepository, StatisticsRepository

from ..dependencies import get_activity, get_notifications, get_session_dep, get_session_factory_dep
from ..schemas import (
    ActivityResponse,
    CatalogResponse,
    DashboardStatsResponse,
    NoticeResponse,
    OverviewResponse,
    SettingResponse,
    ShopNameRequest,
)
from .products import load_catalog

router = APIRouter()

T = TypeVar("T")


async def _optional(fetch: Callable[[], Awaitable[T]], default: T, label: str) -> T:
    """Presentation-only lookups fall back to a sentinel instead of failing the page."""
    try:
        return await fetch()
    except Exception as e:
        logger.warning("Optional dashboard lookup failed", lookup=label, error=f"{type(e).__name__}: {e}")
        return default


@router.get("/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(session: AsyncSession = Depends(get_session_dep)):
    stats = await StatisticsRepository(session).dashboard_stats()
    await session.commit()
    return stats


@router.get("/overview", response_model=OverviewResponse)
async def overview(factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory_dep)):
    async def products() -> CatalogResponse:
        async with factory() as session:
            return await load_catalog(session)

    async def stats() -> dict:
        async with factory() as session:
            return await StatisticsRepository(session).dashboard_stats()

    async def shop_name() -> str | None:
        async with factory() as session:
            return await SettingRepository(session).get(SETTING_SHOP_NAME)

    async def visitor_count() -> int:
        async with factory() as session:
            return await StatisticsRepository(session).visitor_count()

    catalog, stats_data, name, visitors = await asyncio.gather(
        products(),
        stats(),
        _optional(shop_name, None, "shop_name"),
        _optional(visitor_count, 0, "visitor_count"),
    )
    return OverviewResponse(products=catalog, stats=stats_data, shop_name=name, visitor_count=visitors)


@router.get("/settings/{key}", response_model=SettingResponse)
async def get_setting(key: str, session: AsyncSession = Depends(get_session_dep)):
    value = await SettingRepository(session).get(key)
    await session.commit()
    if value is None:
        raise HTTPException(status_code=404, detail="Setting not found")
    return SettingResponse(key=key, value=value)


@router.put("/settings/shop-name", response_model=SettingResponse)
async def save_shop_name(
    payload: ShopNameRequest,
    session: AsyncSession = Depends(get_session_dep),
    notifications: NotificationCenter = Depends(get_notifications),
):
    setting = await SettingRepository(session).save(SETTING_SHOP_NAME, payload.shop_name)
    await session.commit()
    logger.info("Admin shop name saved", shop_name=payload.shop_name)
    await notifications.success("Shop name saved")
    return SettingResponse(key=setting.key, value=setting.value)


@router.get("/notifications", response_model=list[NoticeResponse])
async def recent_notifications(
    limit: int = 20,
    notifications: NotificationCenter = Depends(get_notifications),
):
    return [NoticeResponse.from_notice(notice) for notice in notifications.recent(limit)]


@router.get("/activity", response_model=list[ActivityResponse])
async def recent_activity(
    limit: int = 50,
    topic: Literal["catalog", "product", "order"] | None = None,
    journal: ActivityJournal = Depends(get_activity),
):
    return [ActivityResponse.from_event(event) for event in journal.recent(limit, topic=topic)]
