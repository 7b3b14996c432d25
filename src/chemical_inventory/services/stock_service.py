"""Stock totals computed from storage rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sqlalchemy import case, func
from sqlmodel import Session, select

from chemical_inventory.logging import logger
from chemical_inventory.models import Storage, StoreLocation
from chemical_inventory.rbac import ItemClass, visibility_clause


@dataclass(slots=True)
class StockTotals:
    total: float = 0.0
    current: float = 0.0


class StockService:
    def __init__(self, session: Session):
        self.session = session

    def compute_stock(self, product_id: int, store_location_id: int, unit_id: int) -> float:
        """Summed quantity of the product at the location in the unit; 0 when nothing is stored."""
        stmt = select(func.coalesce(func.sum(Storage.storage_quantity), 0)).where(
            Storage.product == product_id,
            Storage.storelocation == store_location_id,
            Storage.unit == unit_id,
        )
        stock = float(self.session.exec(stmt).one())
        logger.debug(
            "Computed stock",
            product_id=product_id,
            store_location_id=store_location_id,
            unit_id=unit_id,
            stock=stock,
        )
        return stock

    def stock_by_location(
        self, product_id: int, person_id: Optional[int] = None
    ) -> Dict[Tuple[int, int], StockTotals]:
        """Total and on-shelf stock of the product per (store location, unit).

        With ``person_id`` only locations whose entity the person may read
        storages in are reported.
        """
        # storages with an exit date are gone from the shelf but still count in the total
        current = func.sum(
            case((Storage.storage_exitdate.is_(None), Storage.storage_quantity), else_=0)
        )
        stmt = (
            select(Storage.storelocation, Storage.unit, func.sum(Storage.storage_quantity), current)
            .where(Storage.product == product_id)
            .group_by(Storage.storelocation, Storage.unit)
        )
        if person_id is not None:
            stmt = stmt.join(StoreLocation, StoreLocation.storelocation_id == Storage.storelocation).where(
                visibility_clause(person_id, ItemClass.STORAGES, entity_id=StoreLocation.entity)
            )
        return {
            (location, unit): StockTotals(total=float(total or 0), current=float(on_shelf or 0))
            for location, unit, total, on_shelf in self.session.exec(stmt).all()
        }


__all__ = ["StockService", "StockTotals"]
