"""Custom exceptions for the admin API."""

from __future__ import annotations


class OrderError(Exception):
    """Base exception for order administration errors."""

    def __init__(self, message: str, order_id: str | None = None) -> None:
        super().__init__(message)
        self.order_id = order_id


class OrderNotFoundError(OrderError):
    """Raised when no order carries the given order number."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} not found", order_id)


class OrderRefundError(OrderError):
    """Raised when an order is not in a refundable state."""

    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(f"Order {order_id} with status '{status}' cannot be refunded", order_id)
        self.status = status
