"""Ordered catalog: moves products one position up or down in a persisted total order.

Positions are computed from a snapshot of the catalog. A snapshot carries a
revision derived from the ordered ``(id, sort_order)`` pairs so that a move
computed from an outdated listing can be rejected before anything is written.
"""

from __future__ import annotations

import asyncio
import hashlib
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Sequence, Union
from uuid import UUID

from libs.common.events import (
    EVENT_CATALOG_DIVERGED,
    EVENT_CATALOG_RENUMBERED,
    EVENT_CATALOG_REORDERED,
    EVENT_PRODUCT_DELETED,
    EVENT_PRODUCT_TOGGLED,
    Event,
    EventBus,
    get_event_bus,
)
from libs.common.notifications import Notice, NotificationCenter, get_notification_center

from .errors import (
    BoundaryViolationError,
    CatalogError,
    CatalogStoreError,
    ItemNotFoundError,
    PartialReorderFailureError,
    StaleSnapshotError,
    TransientFailureError,
)
from .store import CatalogEntry, CatalogStore

logger = logging.getLogger(__name__)

Confirmation = Callable[[], Union[bool, Awaitable[bool]]]


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class ReorderMode(str, Enum):
    ATOMIC = "atomic"
    TWO_STEP = "two_step"


class CatalogState(str, Enum):
    STABLE = "stable"
    DIVERGED = "diverged"


class OperationStatus(str, Enum):
    SUCCESS = "success"
    UNCHANGED = "unchanged"
    CANCELLED = "cancelled"


def compute_revision(entries: Sequence[CatalogEntry]) -> str:
    digest = hashlib.sha256()
    for entry in entries:
        digest.update(f"{entry.id}:{entry.sort_order};".encode("utf-8"))
    return digest.hexdigest()


@dataclass(frozen=True)
class CatalogSnapshot:
    items: tuple[CatalogEntry, ...]
    revision: str
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_entries(cls, entries: Sequence[CatalogEntry]) -> "CatalogSnapshot":
        items = tuple(entries)
        return cls(items=items, revision=compute_revision(items))

    def index_of(self, item_id: UUID) -> int:
        for idx, entry in enumerate(self.items):
            if entry.id == item_id:
                return idx
        raise ItemNotFoundError(item_id)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class MovePlan:
    current: CatalogEntry
    neighbor: CatalogEntry
    index: int
    target: int


@dataclass
class OperationResult:
    status: OperationStatus
    item_id: UUID | None = None
    notice: Notice | None = None
    snapshot: CatalogSnapshot | None = None


def plan_move(snapshot: CatalogSnapshot, item_id: UUID, direction: Direction) -> MovePlan:
    """Resolve the item and its neighbour, rejecting moves past either end."""
    idx = snapshot.index_of(item_id)
    target = idx - 1 if direction == Direction.UP else idx + 1
    if target < 0 or target >= len(snapshot):
        raise BoundaryViolationError(item_id, direction.value)
    return MovePlan(current=snapshot.items[idx], neighbor=snapshot.items[target], index=idx, target=target)


_catalog_lock: asyncio.Lock | None = None


def get_catalog_lock() -> asyncio.Lock:
    """Process-wide lock so that only one reorder is in flight at a time."""
    global _catalog_lock
    if _catalog_lock is None:
        _catalog_lock = asyncio.Lock()
    return _catalog_lock


class OrderedCatalog:
    def __init__(
        self,
        store: CatalogStore,
        *,
        mode: ReorderMode = ReorderMode.ATOMIC,
        verify_revision: bool = True,
        notifications: NotificationCenter | None = None,
        event_bus: EventBus | None = None,
        lock: asyncio.Lock | None = None,
    ) -> None:
        self.store = store
        self.mode = ReorderMode(mode)
        self.verify_revision = verify_revision
        self.notifications = notifications or get_notification_center()
        self.event_bus = event_bus or get_event_bus()
        self._lock = lock or get_catalog_lock()
        self.snapshot: CatalogSnapshot | None = None
        self.state = CatalogState.STABLE

    async def refresh(self) -> CatalogSnapshot:
        """Re-fetch the authoritative order. This is the only way out of the diverged state."""
        try:
            entries = await self.store.list_products()
        except CatalogStoreError as exc:
            raise TransientFailureError(f"Failed to load catalog: {exc}") from exc
        self.snapshot = CatalogSnapshot.from_entries(entries)
        self.state = CatalogState.STABLE
        return self.snapshot

    async def move_up(self, item_id: UUID, expected_revision: str | None = None) -> OperationResult:
        return await self.move(item_id, Direction.UP, expected_revision=expected_revision)

    async def move_down(self, item_id: UUID, expected_revision: str | None = None) -> OperationResult:
        return await self.move(item_id, Direction.DOWN, expected_revision=expected_revision)

    async def move(
        self,
        item_id: UUID,
        direction: Direction,
        expected_revision: str | None = None,
    ) -> OperationResult:
        direction = Direction(direction)
        async with self._lock:
            try:
                snapshot = await self._snapshot_for_move(expected_revision)
                try:
                    plan = plan_move(snapshot, item_id, direction)
                except BoundaryViolationError:
                    logger.info("Ignoring move %s of product %s at catalog boundary", direction.value, item_id)
                    return OperationResult(status=OperationStatus.UNCHANGED, item_id=item_id, snapshot=snapshot)
                if self.verify_revision:
                    await self._ensure_current(snapshot)
                if self.mode == ReorderMode.ATOMIC:
                    await self._swap_atomic(plan, snapshot)
                else:
                    await self._swap_two_step(plan)
            except CatalogError as exc:
                await self._report_failure(exc, "Failed to reorder product", item_id=str(item_id))
                raise

            logger.info(
                "Moved product %s %s: position %d -> %d (mode=%s)",
                item_id,
                direction.value,
                plan.index,
                plan.target,
                self.mode.value,
            )
            snapshot = await self._refresh_after_success()
            await self.event_bus.publish(
                Event(
                    event_type=EVENT_CATALOG_REORDERED,
                    payload={
                        "item_id": str(plan.current.id),
                        "neighbor_id": str(plan.neighbor.id),
                        "direction": direction.value,
                    },
                )
            )
            notice = await self.notifications.success("Product order updated", item_id=str(item_id))
            return OperationResult(status=OperationStatus.SUCCESS, item_id=item_id, notice=notice, snapshot=snapshot)

    async def toggle_active(self, item_id: UUID, desired: bool) -> OperationResult:
        try:
            await self._call_store(self.store.toggle_product_status(item_id, desired), "toggle", item_id)
        except CatalogError as exc:
            await self._report_failure(exc, "Failed to change product status", item_id=str(item_id))
            raise
        await self.event_bus.publish(
            Event(event_type=EVENT_PRODUCT_TOGGLED, payload={"item_id": str(item_id), "active": desired})
        )
        notice = await self.notifications.success(
            "Product shown" if desired else "Product hidden", item_id=str(item_id)
        )
        return OperationResult(status=OperationStatus.SUCCESS, item_id=item_id, notice=notice)

    async def delete(self, item_id: UUID, confirm: Confirmation) -> OperationResult:
        """Delete a product once ``confirm`` affirmatively returns True.

        Remaining sort keys are left untouched; gaps are part of a valid order.
        """
        answer = confirm()
        if inspect.isawaitable(answer):
            answer = await answer
        if answer is not True:
            logger.info("Deletion of product %s was not confirmed", item_id)
            return OperationResult(status=OperationStatus.CANCELLED, item_id=item_id)

        try:
            await self._call_store(self.store.delete_product(item_id), "delete", item_id)
        except CatalogError as exc:
            await self._report_failure(exc, "Failed to delete product", item_id=str(item_id))
            raise
        if self.snapshot is not None:
            self.snapshot = CatalogSnapshot.from_entries(
                [entry for entry in self.snapshot.items if entry.id != item_id]
            )
        await self.event_bus.publish(Event(event_type=EVENT_PRODUCT_DELETED, payload={"item_id": str(item_id)}))
        notice = await self.notifications.success("Product deleted", item_id=str(item_id))
        return OperationResult(status=OperationStatus.SUCCESS, item_id=item_id, notice=notice, snapshot=self.snapshot)

    async def renumber(self) -> OperationResult:
        """Assign contiguous keys 0..N-1 following the current authoritative order."""
        async with self._lock:
            try:
                snapshot = await self.refresh()
                assignments = {entry.id: position for position, entry in enumerate(snapshot.items)}
                expected = {entry.id: entry.sort_order for entry in snapshot.items}
                await self._call_store(self.store.assign_sort_orders(assignments, expected=expected), "renumber")
            except CatalogError as exc:
                await self._report_failure(exc, "Failed to renumber catalog")
                raise
            logger.info("Renumbered %d products", len(assignments))
            snapshot = await self._refresh_after_success()
            await self.event_bus.publish(
                Event(event_type=EVENT_CATALOG_RENUMBERED, payload={"count": len(assignments)})
            )
            notice = await self.notifications.success("Catalog order repaired", count=len(assignments))
            return OperationResult(status=OperationStatus.SUCCESS, notice=notice, snapshot=snapshot)

    async def _snapshot_for_move(self, expected_revision: str | None) -> CatalogSnapshot:
        if self.state == CatalogState.DIVERGED:
            raise StaleSnapshotError("Catalog order diverged after a failed reorder; reload the catalog")
        snapshot = self.snapshot or await self.refresh()
        if expected_revision is not None and expected_revision != snapshot.revision:
            raise StaleSnapshotError("Catalog changed since it was loaded; reload the catalog")
        return snapshot

    async def _ensure_current(self, snapshot: CatalogSnapshot) -> None:
        try:
            entries = await self.store.list_products()
        except CatalogStoreError as exc:
            raise TransientFailureError(f"Failed to verify catalog revision: {exc}") from exc
        if compute_revision(entries) != snapshot.revision:
            raise StaleSnapshotError("Catalog changed since it was loaded; reload the catalog")

    async def _swap_atomic(self, plan: MovePlan, snapshot: CatalogSnapshot) -> None:
        if plan.current.sort_order != plan.neighbor.sort_order:
            assignments = {plan.current.id: plan.neighbor.sort_order, plan.neighbor.id: plan.current.sort_order}
            expected = {plan.current.id: plan.current.sort_order, plan.neighbor.id: plan.neighbor.sort_order}
        else:
            # Tied keys cannot be exchanged; renumber the whole order with the swap applied.
            order = list(snapshot.items)
            order[plan.index], order[plan.target] = order[plan.target], order[plan.index]
            assignments = {entry.id: position for position, entry in enumerate(order)}
            expected = {entry.id: entry.sort_order for entry in snapshot.items}
            logger.info("Tied sort keys around product %s; renumbering %d products", plan.current.id, len(order))
        await self._call_store(self.store.assign_sort_orders(assignments, expected=expected), "swap", plan.current.id)

    async def _swap_two_step(self, plan: MovePlan) -> None:
        # positional indices are written, not the stored keys
        await self._call_store(self.store.reorder_product(plan.current.id, plan.target), "reorder", plan.current.id)
        try:
            await self.store.reorder_product(plan.neighbor.id, plan.index)
        except (CatalogStoreError, ItemNotFoundError) as exc:
            self.state = CatalogState.DIVERGED
            logger.error(
                "Partial reorder: product %s moved to %d but neighbour %s was not updated: %s",
                plan.current.id,
                plan.target,
                plan.neighbor.id,
                exc,
            )
            await self.event_bus.publish(
                Event(
                    event_type=EVENT_CATALOG_DIVERGED,
                    payload={"item_id": str(plan.current.id), "neighbor_id": str(plan.neighbor.id)},
                )
            )
            raise PartialReorderFailureError(
                f"Product {plan.current.id} was moved but {plan.neighbor.id} was not; reload the catalog",
                plan.current.id,
                plan.neighbor.id,
            ) from exc

    async def _call_store(self, call: Awaitable[None], action: str, item_id: UUID | None = None) -> None:
        try:
            await call
        except CatalogStoreError as exc:
            target = f"product {item_id}" if item_id is not None else "catalog"
            raise TransientFailureError(f"Failed to {action} {target}: {exc}", item_id) from exc

    async def _refresh_after_success(self) -> CatalogSnapshot | None:
        try:
            return await self.refresh()
        except TransientFailureError as exc:
            # the write went through; the next load will pick it up
            logger.warning("Catalog reload after a successful write failed: %s", exc)
            self.snapshot = None
            return None

    async def _report_failure(self, exc: CatalogError, message: str, **context) -> None:
        await self.notifications.error(
            f"{message}: {exc}",
            kind=exc.kind.value,
            recovery=exc.recovery.value,
            **context,
        )
