from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from libs.catalog import CatalogEntry, OperationStatus, OrderedCatalog, compute_revision
from libs.data.repositories import ProductRepository

from ..dependencies import get_catalog, get_session_dep
from ..schemas import (
    CatalogResponse,
    MoveRequest,
    OperationResponse,
    ProductCreateRequest,
    ProductResponse,
    StatusRequest,
)

router = APIRouter()


async def load_catalog(session: AsyncSession) -> CatalogResponse:
    products = await ProductRepository(session).list_ordered()
    revision = compute_revision([CatalogEntry.from_product(product) for product in products])
    return CatalogResponse(
        revision=revision,
        items=[ProductResponse.model_validate(product) for product in products],
    )


@router.get("/products", response_model=CatalogResponse)
async def list_products(session: AsyncSession = Depends(get_session_dep)):
    catalog = await load_catalog(session)
    # Commit read-only transaction to avoid ROLLBACK log noise
    await session.commit()
    return catalog


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreateRequest,
    session: AsyncSession = Depends(get_session_dep),
):
    product = await ProductRepository(session).create(**payload.model_dump())
    await session.commit()
    logger.info("Admin product created", product_id=str(product.id), sort_order=product.sort_order)
    return ProductResponse.model_validate(product)


@router.post("/products/renumber", response_model=OperationResponse)
async def renumber_products(catalog: OrderedCatalog = Depends(get_catalog)):
    result = await catalog.renumber()
    logger.info("Admin catalog renumbered")
    return OperationResponse.from_result(result)


@router.post("/products/{product_id}/move", response_model=OperationResponse)
async def move_product(
    product_id: UUID,
    payload: MoveRequest,
    catalog: OrderedCatalog = Depends(get_catalog),
):
    result = await catalog.move(product_id, payload.direction, expected_revision=payload.revision)
    logger.info(
        "Admin product move",
        product_id=str(product_id),
        direction=payload.direction.value,
        status=result.status.value,
    )
    return OperationResponse.from_result(result)


@router.post("/products/{product_id}/status", response_model=OperationResponse)
async def toggle_product_status(
    product_id: UUID,
    payload: StatusRequest,
    catalog: OrderedCatalog = Depends(get_catalog),
):
    result = await catalog.toggle_active(product_id, payload.active)
    logger.info("Admin product status", product_id=str(product_id), active=payload.active)
    return OperationResponse.from_result(result)


@router.delete("/products/{product_id}", response_model=OperationResponse)
async def delete_product(
    product_id: UUID,
    confirm: bool = Query(default=False),
    catalog: OrderedCatalog = Depends(get_catalog),
):
    result = await catalog.delete(product_id, confirm=lambda: confirm)
    if result.status == OperationStatus.CANCELLED:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail="Deleting a product must be confirmed with confirm=true",
        )
    logger.info("Admin product deleted", product_id=str(product_id))
    return OperationResponse.from_result(result)
