from fastapi import APIRouter

from . import dashboard, orders, products

router = APIRouter()
router.include_router(products.router, tags=["products"])
router.include_router(orders.router, tags=["orders"])
router.include_router(dashboard.router, tags=["dashboard"])

__all__ = ["router"]
