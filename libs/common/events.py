"""Admin activity events: catalog, product and order changes fanned out in-process."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from fnmatch import fnmatchcase
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

EVENT_CATALOG_REORDERED = "catalog.reordered"
EVENT_CATALOG_DIVERGED = "catalog.diverged"
EVENT_CATALOG_RENUMBERED = "catalog.renumbered"
EVENT_PRODUCT_TOGGLED = "product.toggled"
EVENT_PRODUCT_DELETED = "product.deleted"
EVENT_ORDER_REFUNDED = "order.refunded"

# Patterns the activity journal listens on
ACTIVITY_PATTERNS = ("catalog.*", "product.*", "order.*")

Handler = Callable[["Event"], Awaitable[None]]


@dataclass(frozen=True)
class Event:
    event_type: str
    payload: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def topic(self) -> str:
        return self.event_type.split(".", 1)[0]


class EventBus:
    """Dispatches events to handlers subscribed by exact type or glob pattern (``catalog.*``).

    A failing handler is logged and skipped; publishers never see its error.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[str, Handler]] = []

    async def subscribe(self, pattern: str, handler: Handler) -> None:
        self._subscriptions.append((pattern, handler))
        logger.debug("Subscribed %s to %s", getattr(handler, "__qualname__", handler), pattern)

    async def unsubscribe(self, pattern: str, handler: Handler) -> None:
        try:
            self._subscriptions.remove((pattern, handler))
        except ValueError:
            logger.warning("Handler was not subscribed to %s", pattern)

    def handlers_for(self, event_type: str) -> list[Handler]:
        return [handler for pattern, handler in self._subscriptions if fnmatchcase(event_type, pattern)]

    async def publish(self, event: Event) -> None:
        handlers = self.handlers_for(event.event_type)
        if not handlers:
            logger.debug("No handlers for %s", event.event_type)
            return
        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Handler %s failed for %s: %s: %s",
                    getattr(handler, "__qualname__", handler),
                    event.event_type,
                    type(e).__name__,
                    e,
                    exc_info=True,
                )


class ActivityJournal:
    """Bounded, newest-last record of admin activity, fed from the event bus."""

    def __init__(self, history: int = 100) -> None:
        self._events: deque[Event] = deque(maxlen=history)

    async def record(self, event: Event) -> None:
        self._events.append(event)
        logger.info("activity.%s at=%s payload=%s", event.event_type, event.occurred_at.isoformat(), event.payload)

    async def attach(self, bus: EventBus) -> None:
        for pattern in ACTIVITY_PATTERNS:
            await bus.subscribe(pattern, self.record)

    async def detach(self, bus: EventBus) -> None:
        for pattern in ACTIVITY_PATTERNS:
            await bus.unsubscribe(pattern, self.record)

    def recent(self, limit: int | None = None, topic: str | None = None) -> list[Event]:
        events = [event for event in self._events if topic is None or event.topic == topic]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events


_event_bus: EventBus | None = None
_activity_journal: ActivityJournal | None = None


def get_event_bus() -> EventBus:
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def get_activity_journal() -> ActivityJournal:
    global _activity_journal
    if _activity_journal is None:
        _activity_journal = ActivityJournal()
    return _activity_journal
