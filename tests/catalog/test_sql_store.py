import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from libs.catalog import (
    CatalogStoreError,
    ItemNotFoundError,
    OrderedCatalog,
    PartialReorderFailureError,
    ReorderMode,
    SqlCatalogStore,
    StaleSnapshotError,
)
from libs.data.models import Product
from libs.data.models.base import Base


async def _seed(session_factory, *keys: int) -> list[Product]:
    async with session_factory() as session:
        products = [
            Product(name=f"Card {idx}", price=Decimal("9.99"), stock=5, sort_order=key)
            for idx, key in enumerate(keys)
        ]
        session.add_all(products)
        await session.commit()
        return products


@pytest.mark.asyncio
async def test_list_products_orders_by_key_then_id(session_factory):
    products = await _seed(session_factory, 2, 0, 1, 1)
    store = SqlCatalogStore(session_factory)

    entries = await store.list_products()

    assert [entry.sort_order for entry in entries] == [0, 1, 1, 2]
    tied = [entry.id for entry in entries if entry.sort_order == 1]
    assert tied == sorted(p.id for p in products if p.sort_order == 1)
    assert entries == await store.list_products()


@pytest.mark.asyncio
async def test_each_reorder_call_commits_independently(session_factory):
    a, b = await _seed(session_factory, 0, 1)
    store = SqlCatalogStore(session_factory)

    await store.reorder_product(a.id, 1)

    keys = {entry.id: entry.sort_order for entry in await store.list_products()}
    assert keys == {a.id: 1, b.id: 1}


@pytest.mark.asyncio
async def test_reorder_unknown_product_raises_not_found(session_factory):
    store = SqlCatalogStore(session_factory)

    with pytest.raises(ItemNotFoundError):
        await store.reorder_product(uuid4(), 3)


@pytest.mark.asyncio
async def test_assign_sort_orders_checks_expected_keys(session_factory):
    a, b = await _seed(session_factory, 0, 1)
    store = SqlCatalogStore(session_factory)

    with pytest.raises(StaleSnapshotError):
        await store.assign_sort_orders({a.id: 1, b.id: 0}, expected={a.id: 0, b.id: 5})

    keys = {entry.id: entry.sort_order for entry in await store.list_products()}
    assert keys == {a.id: 0, b.id: 1}

    await store.assign_sort_orders({a.id: 1, b.id: 0}, expected={a.id: 0, b.id: 1})
    keys = {entry.id: entry.sort_order for entry in await store.list_products()}
    assert keys == {a.id: 1, b.id: 0}


@pytest.mark.asyncio
async def test_toggle_and_delete(session_factory):
    a, b = await _seed(session_factory, 0, 1)
    store = SqlCatalogStore(session_factory)

    await store.toggle_product_status(a.id, False)
    await store.delete_product(b.id)

    entries = await store.list_products()
    assert [(entry.id, entry.is_active) for entry in entries] == [(a.id, False)]
    with pytest.raises(ItemNotFoundError):
        await store.delete_product(b.id)


@pytest.mark.asyncio
async def test_database_errors_are_wrapped(engine, session_factory):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    store = SqlCatalogStore(session_factory)

    with pytest.raises(CatalogStoreError):
        await store.list_products()


@pytest.mark.asyncio
async def test_listing_retries_dropped_connections(session_factory):
    a, b = await _seed(session_factory, 0, 1)
    calls = []

    def flaky_factory():
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("SELECT", {}, Exception("server closed the connection"))
        return session_factory()

    entries = await SqlCatalogStore(flaky_factory).list_products()

    assert [e.id for e in entries] == [a.id, b.id]
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_ordered_catalog_over_sql_store(session_factory, notifications, event_bus):
    a, b, c = await _seed(session_factory, 0, 1, 2)
    catalog = OrderedCatalog(
        SqlCatalogStore(session_factory),
        notifications=notifications,
        event_bus=event_bus,
        lock=asyncio.Lock(),
    )

    await catalog.move_down(a.id)
    await catalog.move_up(c.id)
    await catalog.delete(b.id, confirm=lambda: True)

    entries = await catalog.store.list_products()
    assert [(entry.id, entry.sort_order) for entry in entries] == [(c.id, 1), (a.id, 2)]


@pytest.mark.asyncio
async def test_two_step_partial_failure_leaves_duplicate_keys(session_factory, notifications, event_bus):
    a, b, c = await _seed(session_factory, 0, 1, 2)
    store = SqlCatalogStore(session_factory)
    original = store.reorder_product
    calls = []

    async def flaky_reorder(item_id, sort_order):
        calls.append(item_id)
        if len(calls) == 2:
            raise CatalogStoreError("connection reset")
        await original(item_id, sort_order)

    store.reorder_product = flaky_reorder
    catalog = OrderedCatalog(
        store,
        mode=ReorderMode.TWO_STEP,
        notifications=notifications,
        event_bus=event_bus,
        lock=asyncio.Lock(),
    )

    with pytest.raises(PartialReorderFailureError):
        await catalog.move_down(a.id)

    snapshot = await catalog.refresh()
    assert [entry.sort_order for entry in snapshot.items] == [1, 1, 2]
    assert snapshot.items == (await catalog.refresh()).items
