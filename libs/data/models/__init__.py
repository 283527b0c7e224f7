from .base import Base
from .order import ORDER_STATUSES, SETTLED_STATUSES, Order, OrderStatus
from .product import Product
from .setting import Setting

__all__ = ["Base", "Order", "OrderStatus", "ORDER_STATUSES", "SETTLED_STATUSES", "Product", "Setting"]
