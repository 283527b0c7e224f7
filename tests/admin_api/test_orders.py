from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from libs.data.models import Order, OrderStatus


@pytest.fixture
async def orders(session):
    now = datetime.now(timezone.utc)
    session.add_all(
        [
            Order(order_no="A-1", product_name="Steam 50", amount=Decimal("50"), status=OrderStatus.PAID,
                  username="neo", email="neo@example.com", created_at=now - timedelta(minutes=3)),
            Order(order_no="A-2", product_name="Steam 20", amount=Decimal("20"), status=None,
                  created_at=now - timedelta(minutes=2)),
            Order(order_no="A-3", product_name="Xbox 10", amount=Decimal("10"), status=OrderStatus.DELIVERED,
                  trade_no="T-9", card_key="AAAA-BBBB", created_at=now - timedelta(minutes=1)),
        ]
    )
    await session.commit()


@pytest.mark.asyncio
async def test_list_orders_filters(client, orders):
    everything = await client.get("/admin/orders")
    pending = await client.get("/admin/orders", params={"status": "pending"})
    steam = await client.get("/admin/orders", params={"q": "steam"})

    assert [o["order_id"] for o in everything.json()] == ["A-3", "A-2", "A-1"]
    assert [o["order_id"] for o in pending.json()] == ["A-2"]
    assert pending.json()[0]["status"] == "pending"
    assert [o["order_id"] for o in steam.json()] == ["A-2", "A-1"]


@pytest.mark.asyncio
async def test_list_orders_rejects_unknown_status(client, orders):
    response = await client.get("/admin/orders", params={"status": "lost"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_refund_paid_order(client, orders):
    response = await client.post("/admin/orders/A-1/refund")

    assert response.status_code == 200
    assert response.json()["notice"]["message"] == "Order refunded"
    refunded = await client.get("/admin/orders", params={"status": "refunded"})
    assert [o["order_id"] for o in refunded.json()] == ["A-1"]


@pytest.mark.asyncio
async def test_refund_rejects_pending_and_refunded_orders(client, orders):
    pending = await client.post("/admin/orders/A-2/refund")
    await client.post("/admin/orders/A-3/refund")
    twice = await client.post("/admin/orders/A-3/refund")

    assert pending.status_code == 409
    assert twice.status_code == 409


@pytest.mark.asyncio
async def test_refund_unknown_order(client, orders):
    response = await client.post("/admin/orders/NOPE/refund")

    assert response.status_code == 404
