from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from libs.data.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class OrderStatus(str):
    PENDING = "pending"
    PAID = "paid"
    DELIVERED = "delivered"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


ORDER_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.DELIVERED,
    OrderStatus.REFUNDED,
    OrderStatus.CANCELLED,
)

# Orders that count towards revenue and may be refunded
SETTLED_STATUSES = (OrderStatus.PAID, OrderStatus.DELIVERED)


class Order(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "orders"

    order_no: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    username: Mapped[str | None] = mapped_column(String(128))
    email: Mapped[str | None] = mapped_column(String(256))
    product_name: Mapped[str] = mapped_column(String(256))
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    # NULL is reported as pending
    status: Mapped[str | None] = mapped_column(String(32), index=True)
    card_key: Mapped[str | None] = mapped_column(String(512))
    trade_no: Mapped[str | None] = mapped_column(String(128))
