"""Domain services."""

from chemical_inventory.services.entity_service import EntityDraft, EntityService
from chemical_inventory.services.product_service import ProductDraft, ProductService
from chemical_inventory.services.references import (
    ExistingReference,
    NewReference,
    ReferenceKind,
    ReferenceResolver,
    reference_from_sentinel,
)
from chemical_inventory.services.stock_service import StockService, StockTotals

__all__ = [
    "EntityDraft",
    "EntityService",
    "ExistingReference",
    "NewReference",
    "ProductDraft",
    "ProductService",
    "ReferenceKind",
    "ReferenceResolver",
    "StockService",
    "StockTotals",
    "reference_from_sentinel",
]
