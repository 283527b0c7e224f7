from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from libs.common import AppSettings
from libs.common.events import EVENT_ORDER_REFUNDED, Event, EventBus
from libs.common.notifications import NotificationCenter
from libs.data.models import SETTLED_STATUSES, OrderStatus
from libs.data.repositories import OrderRepository

from ..dependencies import get_events, get_notifications, get_session_dep, get_settings_dep
from ..exceptions import OrderNotFoundError, OrderRefundError
from ..schemas import NoticeResponse, OperationResponse, OrderResponse

router = APIRouter()

StatusFilter = Literal["all", "pending", "paid", "delivered", "refunded", "cancelled"]


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(
    q: str | None = None,
    status: StatusFilter = Query(default="all"),
    session: AsyncSession = Depends(get_session_dep),
    settings: AppSettings = Depends(get_settings_dep),
):
    orders = await OrderRepository(session).search(q, status=status, limit=settings.order_search_limit)
    logger.info("Admin order search", query=q, status=status, found=len(orders))
    data = [OrderResponse.from_order(order) for order in orders]
    await session.commit()
    return data


@router.post("/orders/{order_id}/refund", response_model=OperationResponse)
async def refund_order(
    order_id: str,
    session: AsyncSession = Depends(get_session_dep),
    notifications: NotificationCenter = Depends(get_notifications),
    event_bus: EventBus = Depends(get_events),
):
    order = await OrderRepository(session).get_by_order_no(order_id)
    if not order:
        await notifications.error(f"Order {order_id} not found", order_id=order_id)
        raise OrderNotFoundError(order_id)
    current_status = order.status or OrderStatus.PENDING
    if current_status not in SETTLED_STATUSES:
        await notifications.error(f"Order {order_id} cannot be refunded", order_id=order_id, status=current_status)
        raise OrderRefundError(order_id, current_status)

    order.status = OrderStatus.REFUNDED
    await session.commit()
    logger.info("Admin refund", order_id=order_id, previous_status=current_status)
    await event_bus.publish(
        Event(event_type=EVENT_ORDER_REFUNDED, payload={"order_id": order_id, "previous_status": current_status})
    )
    notice = await notifications.success("Order refunded", order_id=order_id)
    return OperationResponse(status="success", notice=NoticeResponse.from_notice(notice))
