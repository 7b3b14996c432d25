"""Stock endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from chemical_inventory.auth.dependencies import get_current_person_id, get_session
from chemical_inventory.errors import NotFoundError
from chemical_inventory.models import StoreLocation
from chemical_inventory.rbac import ItemClass, PermissionLevel, PermissionService
from chemical_inventory.services import StockService

router = APIRouter(prefix="/api/stocks", tags=["Stocks"])


class StockRead(BaseModel):
    product_id: int
    store_location_id: int
    unit_id: int
    stock: float


class LocationStockRead(BaseModel):
    store_location_id: int
    unit_id: int
    total: float
    current: float


@router.get("/{product_id}", response_model=List[LocationStockRead])
async def product_stocks(
    product_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> List[LocationStockRead]:
    PermissionService(session).require_permission_in_any_entity(
        person_id, PermissionLevel.READ, ItemClass.STORAGES
    )
    totals = StockService(session).stock_by_location(product_id, person_id)
    return [
        LocationStockRead(store_location_id=location, unit_id=unit, total=stock.total, current=stock.current)
        for (location, unit), stock in sorted(totals.items())
    ]


@router.get("/{product_id}/{store_location_id}/{unit_id}", response_model=StockRead)
async def compute_stock(
    product_id: int,
    store_location_id: int,
    unit_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> StockRead:
    location = session.get(StoreLocation, store_location_id)
    if location is None:
        raise NotFoundError("storelocation", store_location_id)
    PermissionService(session).require_permission(
        person_id, PermissionLevel.READ, ItemClass.STORAGES, location.entity
    )
    stock = StockService(session).compute_stock(product_id, store_location_id, unit_id)
    return StockRead(product_id=product_id, store_location_id=store_location_id, unit_id=unit_id, stock=stock)
