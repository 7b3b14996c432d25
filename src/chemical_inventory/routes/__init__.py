"""API routers."""

from __future__ import annotations

from fastapi import APIRouter

from .entities import router as entities_router
from .permissions import router as permissions_router
from .products import router as products_router
from .stocks import router as stocks_router

api_router = APIRouter()

api_router.include_router(permissions_router)
api_router.include_router(products_router)
api_router.include_router(entities_router)
api_router.include_router(stocks_router)


@api_router.get("/status", tags=["monitoring"], summary="API status endpoint")
async def status() -> dict[str, str]:
    return {"status": "ok"}


__all__ = ["api_router"]
