from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from libs.catalog import Direction, OperationResult
from libs.common.constants import SHOP_NAME_MAX_LENGTH
from libs.common.events import Event
from libs.common.notifications import Notice
from libs.data.models import Order, OrderStatus


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    price: Decimal
    category: str | None = None
    stock: int
    is_active: bool
    sort_order: int


class CatalogResponse(BaseModel):
    revision: str
    items: list[ProductResponse]


class ProductCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    price: Decimal = Field(ge=0)
    category: str | None = None
    stock: int = Field(default=0, ge=0)
    is_active: bool = True


class MoveRequest(BaseModel):
    direction: Direction
    revision: str | None = None  # token from the listing the move was computed against


class StatusRequest(BaseModel):
    active: bool


class NoticeResponse(BaseModel):
    level: str
    message: str
    kind: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_notice(cls, notice: Notice) -> "NoticeResponse":
        return cls(**notice.as_dict())


class OperationResponse(BaseModel):
    status: str
    item_id: UUID | None = None
    revision: str | None = None
    notice: NoticeResponse | None = None

    @classmethod
    def from_result(cls, result: OperationResult) -> "OperationResponse":
        return cls(
            status=result.status.value,
            item_id=result.item_id,
            revision=result.snapshot.revision if result.snapshot else None,
            notice=NoticeResponse.from_notice(result.notice) if result.notice else None,
        )


class OrderResponse(BaseModel):
    order_id: str
    username: str | None = None
    email: str | None = None
    product_name: str
    amount: Decimal
    status: str
    card_key: str | None = None
    trade_no: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.order_no,
            username=order.username,
            email=order.email,
            product_name=order.product_name,
            amount=order.amount,
            status=order.status or OrderStatus.PENDING,
            card_key=order.card_key,
            trade_no=order.trade_no,
            created_at=order.created_at,
        )


class StatsWindow(BaseModel):
    count: int
    revenue: float


class DashboardStatsResponse(BaseModel):
    today: StatsWindow
    week: StatsWindow
    month: StatsWindow
    total: StatsWindow


class ShopNameRequest(BaseModel):
    shop_name: str

    @field_validator("shop_name")
    @classmethod
    def strip_and_require(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Shop name must not be empty")
        if len(trimmed) > SHOP_NAME_MAX_LENGTH:
            raise ValueError(f"Shop name must be at most {SHOP_NAME_MAX_LENGTH} characters")
        return trimmed


class SettingResponse(BaseModel):
    key: str
    value: str | None = None


class OverviewResponse(BaseModel):
    products: CatalogResponse
    stats: DashboardStatsResponse
    shop_name: str | None = None
    visitor_count: int = 0


class ActivityResponse(BaseModel):
    event_type: str
    payload: dict[str, Any]
    occurred_at: datetime

    @classmethod
    def from_event(cls, event: Event) -> "ActivityResponse":
        return cls(event_type=event.event_type, payload=event.payload, occurred_at=event.occurred_at)
