"""Product catalogue endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlmodel import Session

from chemical_inventory.auth.dependencies import get_current_person_id, get_session
from chemical_inventory.models import Product
from chemical_inventory.rbac import ItemClass, PermissionLevel, PermissionService
from chemical_inventory.services import ProductDraft, ProductService

router = APIRouter(prefix="/api/products", tags=["Products"])


class LabelledRow(BaseModel):
    id: int
    label: str


class ProductRead(BaseModel):
    product_id: int
    name: LabelledRow
    cas_number: LabelledRow
    ce_number: Optional[LabelledRow] = None
    empirical_formula: LabelledRow
    class_of_compound: Optional[LabelledRow] = None
    physicalstate: Optional[int] = None
    signalword: Optional[int] = None
    person: int

    product_specificity: Optional[str] = None
    product_msds: Optional[str] = None
    product_restricted: Optional[bool] = None
    product_radioactive: Optional[bool] = None
    product_linearformula: Optional[str] = None
    product_threedformula: Optional[str] = None
    product_disposalcomment: Optional[str] = None
    product_remark: Optional[str] = None

    symbols: List[int] = []
    synonyms: List[LabelledRow] = []
    hazard_statements: List[int] = []
    precautionary_statements: List[int] = []
    bookmarked: bool = False


class ProductPage(BaseModel):
    items: List[ProductRead]
    total: int


class ProductCreated(BaseModel):
    product_id: int


def _labelled(row, kind: str) -> Optional[LabelledRow]:
    if row is None:
        return None
    return LabelledRow(id=getattr(row, f"{kind}_id"), label=getattr(row, f"{kind}_label"))


def _product_read(product: Product, bookmarked: bool = False) -> ProductRead:
    return ProductRead(
        product_id=product.product_id,
        name=_labelled(product.product_name, "name"),
        cas_number=_labelled(product.cas_number, "casnumber"),
        ce_number=_labelled(product.ce_number, "cenumber"),
        empirical_formula=_labelled(product.empirical_formula, "empiricalformula"),
        class_of_compound=_labelled(product.class_of_compound, "classofcompound"),
        physicalstate=product.physicalstate,
        signalword=product.signalword,
        person=product.person,
        product_specificity=product.product_specificity,
        product_msds=product.product_msds,
        product_restricted=product.product_restricted,
        product_radioactive=product.product_radioactive,
        product_linearformula=product.product_linearformula,
        product_threedformula=product.product_threedformula,
        product_disposalcomment=product.product_disposalcomment,
        product_remark=product.product_remark,
        symbols=[symbol.symbol_id for symbol in product.symbols],
        synonyms=[_labelled(synonym, "name") for synonym in product.synonyms],
        hazard_statements=[statement.hazardstatement_id for statement in product.hazard_statements],
        precautionary_statements=[
            statement.precautionarystatement_id for statement in product.precautionary_statements
        ],
        bookmarked=bookmarked,
    )


@router.get("", response_model=ProductPage)
async def list_products(
    search: str = "",
    entity: Optional[int] = None,
    storelocation: Optional[int] = None,
    name: Optional[int] = None,
    bookmark: bool = False,
    sort: str = Query("name", pattern="^(name|product_id)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> ProductPage:
    service = ProductService(session)
    products, total = service.list_products(
        person_id,
        search=search,
        entity_id=entity,
        store_location_id=storelocation,
        name_id=name,
        bookmarked_only=bookmark,
        order_by=sort,
        descending=order == "desc",
        limit=limit,
        offset=offset,
    )
    return ProductPage(items=[_product_read(product) for product in products], total=total)


@router.post("", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
async def create_product(
    draft: ProductDraft,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> ProductCreated:
    PermissionService(session).require_permission_in_any_entity(
        person_id, PermissionLevel.WRITE, ItemClass.PRODUCTS
    )
    owned = draft.model_copy(update={"person": person_id})
    return ProductCreated(product_id=ProductService(session).create_product(owned))


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> ProductRead:
    PermissionService(session).require_permission_in_any_entity(
        person_id, PermissionLevel.READ, ItemClass.PRODUCTS
    )
    service = ProductService(session)
    product = service.get_product(product_id)
    return _product_read(product, bookmarked=service.is_bookmarked(product_id, person_id))


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_product(
    product_id: int,
    draft: ProductDraft,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> Response:
    PermissionService(session).require_permission_in_any_entity(
        person_id, PermissionLevel.WRITE, ItemClass.PRODUCTS
    )
    owned = draft.model_copy(update={"product_id": product_id, "person": person_id})
    ProductService(session).update_product(owned)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> Response:
    PermissionService(session).require_permission_in_any_entity(
        person_id, PermissionLevel.WRITE, ItemClass.PRODUCTS
    )
    ProductService(session).delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{product_id}/bookmark", status_code=status.HTTP_204_NO_CONTENT)
async def toggle_bookmark(
    product_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> Response:
    """Bookmark the product, or remove the bookmark when it is already set."""
    PermissionService(session).require_permission_in_any_entity(
        person_id, PermissionLevel.READ, ItemClass.PRODUCTS
    )
    service = ProductService(session)
    if service.is_bookmarked(product_id, person_id):
        service.delete_bookmark(product_id, person_id)
    else:
        service.create_bookmark(product_id, person_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
