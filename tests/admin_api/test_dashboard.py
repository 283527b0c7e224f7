from datetime import datetime, timezone
from decimal import Decimal

import pytest

from libs.common.constants import SETTING_VISITOR_COUNT
from libs.data.models import Order, OrderStatus, Product, Setting


@pytest.mark.asyncio
async def test_shop_name_is_trimmed(client):
    response = await client.put("/admin/settings/shop-name", json={"shop_name": "  Key Shop  "})

    assert response.status_code == 200
    assert response.json() == {"key": "shop_name", "value": "Key Shop"}
    stored = await client.get("/admin/settings/shop_name")
    assert stored.json()["value"] == "Key Shop"


@pytest.mark.asyncio
async def test_empty_shop_name_is_rejected(client):
    response = await client.put("/admin/settings/shop-name", json={"shop_name": "   "})

    assert response.status_code == 422
    assert (await client.get("/admin/settings/shop_name")).status_code == 404


@pytest.mark.asyncio
async def test_stats(client, session):
    session.add(
        Order(order_no="S-1", product_name="Card", amount=Decimal("12.5"), status=OrderStatus.PAID,
              created_at=datetime.now(timezone.utc))
    )
    await session.commit()

    response = await client.get("/admin/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == {"count": 1, "revenue": 12.5}
    assert body["today"]["count"] == 1


@pytest.mark.asyncio
async def test_overview_defaults_optional_lookups(client, session):
    session.add(Product(name="Card", price=Decimal("1"), stock=1, sort_order=0))
    session.add(Setting(key=SETTING_VISITOR_COUNT, value="not-a-number"))
    await session.commit()

    response = await client.get("/admin/overview")

    assert response.status_code == 200
    body = response.json()
    assert body["shop_name"] is None
    assert body["visitor_count"] == 0
    assert [item["name"] for item in body["products"]["items"]] == ["Card"]
    assert body["stats"]["total"] == {"count": 0, "revenue": 0.0}


@pytest.mark.asyncio
async def test_overview_reports_saved_values(client, session):
    session.add_all([Setting(key="shop_name", value="Keys"), Setting(key=SETTING_VISITOR_COUNT, value="7")])
    await session.commit()

    body = (await client.get("/admin/overview")).json()

    assert body["shop_name"] == "Keys"
    assert body["visitor_count"] == 7
