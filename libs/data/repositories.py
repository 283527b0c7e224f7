from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, String, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.common.constants import (
    ORDER_STATUS_FILTER_ALL,
    SETTING_VISITOR_COUNT,
    STATS_MONTH_DAYS,
    STATS_WEEK_DAYS,
)
from .models import SETTLED_STATUSES, Order, OrderStatus, Product, Setting


class ProductRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_ordered(self) -> Sequence[Product]:
        """All products, active and hidden, by sort order with id as tie-breaker."""
        stmt = select(Product).order_by(Product.sort_order.asc(), Product.id.asc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get(self, product_id: UUID) -> Product | None:
        return await self.session.get(Product, product_id)

    async def get_many(self, product_ids: list[UUID], *, for_update: bool = False) -> dict[UUID, Product]:
        stmt = select(Product).where(Product.id.in_(product_ids))
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return {product.id: product for product in result.scalars().all()}

    async def next_sort_order(self) -> int:
        result = await self.session.execute(select(func.max(Product.sort_order)))
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def create(
        self,
        *,
        name: str,
        price: Decimal,
        category: str | None = None,
        stock: int = 0,
        is_active: bool = True,
    ) -> Product:
        product = Product(
            name=name,
            price=price,
            category=category,
            stock=stock,
            is_active=is_active,
            sort_order=await self.next_sort_order(),
        )
        self.session.add(product)
        await self.session.flush()
        return product

    async def set_sort_order(self, product_id: UUID, sort_order: int) -> Product | None:
        product = await self.get(product_id)
        if product:
            product.sort_order = sort_order
            await self.session.flush()
        return product

    async def set_active(self, product_id: UUID, active: bool) -> Product | None:
        product = await self.get(product_id)
        if product:
            product.is_active = active
            await self.session.flush()
        return product

    async def delete(self, product_id: UUID) -> bool:
        result = await self.session.execute(delete(Product).where(Product.id == product_id))
        return result.rowcount > 0


class OrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def search(
        self,
        query: str | None = None,
        status: str = ORDER_STATUS_FILTER_ALL,
        limit: int = 200,
    ) -> Sequence[Order]:
        stmt: Select[tuple[Order]] = select(Order)
        if status != ORDER_STATUS_FILTER_ALL:
            stmt = stmt.where(func.coalesce(Order.status, OrderStatus.PENDING) == status)
        needle = (query or "").strip().lower()
        if needle:
            columns = (
                Order.order_no,
                Order.username,
                Order.email,
                Order.product_name,
                Order.trade_no,
                Order.card_key,
            )
            haystack = [func.lower(func.coalesce(column, ""), type_=String) for column in columns]
            stmt = stmt.where(or_(*(field.contains(needle, autoescape=True) for field in haystack)))
        stmt = stmt.order_by(Order.created_at.desc(), Order.order_no.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_by_order_no(self, order_no: str) -> Order | None:
        stmt = select(Order).where(Order.order_no == order_no)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class SettingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, key: str) -> str | None:
        setting = await self.session.get(Setting, key)
        return setting.value if setting else None

    async def save(self, key: str, value: str) -> Setting:
        setting = await self.session.get(Setting, key)
        if setting:
            setting.value = value
        else:
            setting = Setting(key=key, value=value)
            self.session.add(setting)
        await self.session.flush()
        return setting


class StatisticsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _window(self, since: datetime | None) -> dict[str, float | int]:
        stmt = select(func.count(Order.id), func.coalesce(func.sum(Order.amount), 0)).where(
            Order.status.in_(SETTLED_STATUSES)
        )
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        result = await self.session.execute(stmt)
        count, revenue = result.one()
        return {"count": int(count), "revenue": float(revenue or 0)}

    async def dashboard_stats(self, now: datetime | None = None) -> dict[str, dict[str, float | int]]:
        now = now or datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return {
            "today": await self._window(start_of_day),
            "week": await self._window(now - timedelta(days=STATS_WEEK_DAYS)),
            "month": await self._window(now - timedelta(days=STATS_MONTH_DAYS)),
            "total": await self._window(None),
        }

    async def visitor_count(self) -> int:
        value = await SettingRepository(self.session).get(SETTING_VISITOR_COUNT)
        return int(value) if value else 0
