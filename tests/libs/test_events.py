import pytest

from libs.common.events import (
    EVENT_CATALOG_DIVERGED,
    EVENT_CATALOG_REORDERED,
    EVENT_ORDER_REFUNDED,
    EVENT_PRODUCT_DELETED,
    ActivityJournal,
    Event,
    EventBus,
)


@pytest.mark.asyncio
async def test_glob_subscriptions_match_by_prefix():
    bus = EventBus()
    catalog_events = []
    diverged = []

    async def on_catalog(event: Event):
        catalog_events.append(event.event_type)

    async def on_diverged(event: Event):
        diverged.append(event.payload["item_id"])

    await bus.subscribe("catalog.*", on_catalog)
    await bus.subscribe(EVENT_CATALOG_DIVERGED, on_diverged)

    await bus.publish(Event(event_type=EVENT_CATALOG_REORDERED, payload={}))
    await bus.publish(Event(event_type=EVENT_CATALOG_DIVERGED, payload={"item_id": "a"}))
    await bus.publish(Event(event_type=EVENT_PRODUCT_DELETED, payload={}))

    assert catalog_events == [EVENT_CATALOG_REORDERED, EVENT_CATALOG_DIVERGED]
    assert diverged == ["a"]


@pytest.mark.asyncio
async def test_event_bus_isolates_failing_handlers():
    bus = EventBus()
    received = []

    async def broken(event: Event):
        raise RuntimeError("boom")

    async def healthy(event: Event):
        received.append(event.event_type)

    await bus.subscribe("x", broken)
    await bus.subscribe("x", healthy)
    await bus.publish(Event(event_type="x", payload={}))
    await bus.unsubscribe("x", healthy)
    await bus.publish(Event(event_type="x", payload={}))

    assert received == ["x"]
    assert bus.handlers_for("x") == [broken]


@pytest.mark.asyncio
async def test_activity_journal_records_domain_events():
    bus = EventBus()
    journal = ActivityJournal(history=2)
    await journal.attach(bus)

    await bus.publish(Event(event_type=EVENT_CATALOG_REORDERED, payload={"item_id": "a"}))
    await bus.publish(Event(event_type="settings.saved", payload={}))
    await bus.publish(Event(event_type=EVENT_PRODUCT_DELETED, payload={"item_id": "b"}))
    await bus.publish(Event(event_type=EVENT_ORDER_REFUNDED, payload={"order_id": "X-1"}))

    assert [e.event_type for e in journal.recent()] == [EVENT_PRODUCT_DELETED, EVENT_ORDER_REFUNDED]
    assert [e.payload for e in journal.recent(topic="order")] == [{"order_id": "X-1"}]
    assert journal.recent(0) == []

    await journal.detach(bus)
    await bus.publish(Event(event_type=EVENT_CATALOG_REORDERED, payload={}))
    assert len(journal.recent()) == 2
