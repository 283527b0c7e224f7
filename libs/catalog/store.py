"""Persistence boundary of the ordered catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence
from uuid import UUID

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from libs.data.models import Product
from libs.data.repositories import ProductRepository

from .errors import CatalogStoreError, ItemNotFoundError, StaleSnapshotError

logger = logging.getLogger(__name__)

LIST_ATTEMPTS = 3


@dataclass(frozen=True)
class CatalogEntry:
    id: UUID
    sort_order: int
    is_active: bool = True
    name: str = ""

    @classmethod
    def from_product(cls, product: Product) -> "CatalogEntry":
        return cls(
            id=product.id,
            sort_order=product.sort_order,
            is_active=product.is_active,
            name=product.name,
        )


class CatalogStore(Protocol):
    async def list_products(self) -> Sequence[CatalogEntry]:
        """Return every product ordered by (sort_order, id)."""

    async def reorder_product(self, item_id: UUID, sort_order: int) -> None:
        """Set a single product's sort key."""

    async def assign_sort_orders(
        self,
        assignments: Mapping[UUID, int],
        expected: Mapping[UUID, int] | None = None,
    ) -> None:
        """Set several sort keys in one transaction.

        When ``expected`` is given every listed id must still carry that key,
        otherwise nothing is written and ``StaleSnapshotError`` is raised.
        """

    async def toggle_product_status(self, item_id: UUID, active: bool) -> None:
        ...

    async def delete_product(self, item_id: UUID) -> None:
        ...


class SqlCatalogStore:
    """CatalogStore over SQLAlchemy; every call runs in its own session and transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def list_products(self) -> Sequence[CatalogEntry]:
        # Idempotent read: connection drops are retried.
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(OperationalError),
                wait=wait_exponential(multiplier=0.2, max=2),
                stop=stop_after_attempt(LIST_ATTEMPTS),
                reraise=True,
            ):
                with attempt:
                    async with self.session_factory() as session:
                        products = await ProductRepository(session).list_ordered()
                        return [CatalogEntry.from_product(product) for product in products]
        except SQLAlchemyError as exc:
            raise CatalogStoreError(f"Failed to list products: {exc}") from exc

    async def reorder_product(self, item_id: UUID, sort_order: int) -> None:
        try:
            async with self.session_factory() as session:
                product = await ProductRepository(session).set_sort_order(item_id, sort_order)
                if product is None:
                    raise ItemNotFoundError(item_id)
                await session.commit()
        except SQLAlchemyError as exc:
            raise CatalogStoreError(f"Failed to reorder product {item_id}: {exc}") from exc

    async def assign_sort_orders(
        self,
        assignments: Mapping[UUID, int],
        expected: Mapping[UUID, int] | None = None,
    ) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repo = ProductRepository(session)
                    products = await repo.get_many(list(assignments), for_update=True)
                    for item_id in assignments:
                        if item_id not in products:
                            raise ItemNotFoundError(item_id)
                    for item_id, sort_order in (expected or {}).items():
                        current = products.get(item_id)
                        if current is None or current.sort_order != sort_order:
                            raise StaleSnapshotError(
                                f"Product {item_id} no longer has sort order {sort_order}", item_id
                            )
                    for item_id, sort_order in assignments.items():
                        products[item_id].sort_order = sort_order
            logger.debug("Assigned sort orders: %s", {str(k): v for k, v in assignments.items()})
        except SQLAlchemyError as exc:
            raise CatalogStoreError(f"Failed to assign sort orders: {exc}") from exc

    async def toggle_product_status(self, item_id: UUID, active: bool) -> None:
        try:
            async with self.session_factory() as session:
                product = await ProductRepository(session).set_active(item_id, active)
                if product is None:
                    raise ItemNotFoundError(item_id)
                await session.commit()
        except SQLAlchemyError as exc:
            raise CatalogStoreError(f"Failed to toggle product {item_id}: {exc}") from exc

    async def delete_product(self, item_id: UUID) -> None:
        try:
            async with self.session_factory() as session:
                deleted = await ProductRepository(session).delete(item_id)
                if not deleted:
                    raise ItemNotFoundError(item_id)
                await session.commit()
        except SQLAlchemyError as exc:
            raise CatalogStoreError(f"Failed to delete product {item_id}: {exc}") from exc
