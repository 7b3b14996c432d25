"""Product aggregate writes and reads.

Creating or updating a product is a single transaction: lookup rows are
resolved first (the product's foreign keys need them), then the product row
is written, then every association set is replaced by delete-all/insert.
Any failure rolls the whole transaction back.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple, Type

from pydantic import BaseModel, Field
from sqlalchemy import delete, func, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from chemical_inventory.db import transaction
from chemical_inventory.errors import InventoryError, NotFoundError, WriteError
from chemical_inventory.logging import logger
from chemical_inventory.models import (
    Bookmark,
    Name,
    Product,
    ProductHazardStatements,
    ProductPrecautionaryStatements,
    ProductSymbols,
    ProductSynonyms,
    Storage,
    StoreLocation,
)
from chemical_inventory.rbac import ItemClass, visibility_clause
from chemical_inventory.services.references import (
    ExistingReference,
    NewReference,
    Reference,
    ReferenceKind,
    ReferenceResolver,
)

# Attributes written only when the caller supplied them.
SPARSE_COLUMNS = (
    "product_specificity",
    "product_msds",
    "product_restricted",
    "product_radioactive",
    "product_linearformula",
    "product_threedformula",
    "product_disposalcomment",
    "product_remark",
    "physicalstate",
    "signalword",
)

ORDER_COLUMNS = {
    "name": Name.name_label,
    "product_id": Product.product_id,
}


class ProductDraft(BaseModel):
    """A decoded product create/update request.

    Fields left out of the request are absent from ``model_fields_set`` and are
    not written; this is unrelated to a column being NULL.
    """

    product_id: Optional[int] = None

    product_specificity: Optional[str] = None
    product_msds: Optional[str] = None
    product_restricted: Optional[bool] = None
    product_radioactive: Optional[bool] = None
    product_linearformula: Optional[str] = None
    product_threedformula: Optional[str] = None
    product_disposalcomment: Optional[str] = None
    product_remark: Optional[str] = None
    physicalstate: Optional[int] = None
    signalword: Optional[int] = None

    cas_number: Reference
    ce_number: Optional[Reference] = None
    name: Reference
    empirical_formula: Reference
    class_of_compound: Optional[Reference] = None
    # owner; the API fills it from the authenticated person
    person: Optional[int] = None

    symbols: List[int] = Field(default_factory=list)
    synonyms: List[Reference] = Field(default_factory=list)
    hazard_statements: List[int] = Field(default_factory=list)
    precautionary_statements: List[int] = Field(default_factory=list)


class ResolvedReferences(BaseModel):
    casnumber: int
    cenumber: Optional[int] = None
    name: int
    empiricalformula: int
    classofcompound: Optional[int] = None
    synonyms: List[int] = Field(default_factory=list)


# (link table, product column, target column)
_ASSOCIATIONS: Dict[str, Tuple[Type[SQLModel], str, str]] = {
    "symbols": (ProductSymbols, "productsymbols_product_id", "productsymbols_symbol_id"),
    "synonyms": (ProductSynonyms, "productsynonyms_product_id", "productsynonyms_name_id"),
    "hazard_statements": (
        ProductHazardStatements,
        "producthazardstatements_product_id",
        "producthazardstatements_hazardstatement_id",
    ),
    "precautionary_statements": (
        ProductPrecautionaryStatements,
        "productprecautionarystatements_product_id",
        "productprecautionarystatements_precautionarystatement_id",
    ),
}


class ProductService:
    """Product upsert coordinator plus the product read/delete/bookmark operations."""

    def __init__(self, session: Session):
        self.session = session
        self.resolver = ReferenceResolver(session)

    # Writes

    def create_product(self, draft: ProductDraft) -> int:
        """Create the product with its lookup rows and associations. Returns its id."""
        product_id = self._upsert(draft, creating=True)
        logger.info("Product created", product_id=product_id)
        return product_id

    def update_product(self, draft: ProductDraft) -> None:
        if draft.product_id is None:
            raise ValueError("product_id is required to update a product")
        self._upsert(draft, creating=False)
        logger.info("Product updated", product_id=draft.product_id)

    def delete_product(self, product_id: int) -> None:
        step = "read:product"
        try:
            with transaction(self.session):
                product = self.session.get(Product, product_id)
                if product is None:
                    raise NotFoundError("product", product_id)
                for link_model, product_column, _ in _ASSOCIATIONS.values():
                    step = f"delete:{link_model.__tablename__}"
                    self.session.exec(delete(link_model).where(getattr(link_model, product_column) == product_id))
                step = "delete:bookmark"
                self.session.exec(delete(Bookmark).where(Bookmark.product == product_id))
                step = "delete:product"
                self.session.exec(delete(Product).where(Product.product_id == product_id))
        except InventoryError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Product delete rolled back", product_id=product_id, step=step, error=str(exc))
            raise WriteError(f"could not delete product {product_id}", step=step) from exc
        logger.info("Product deleted", product_id=product_id)

    def _upsert(self, draft: ProductDraft, *, creating: bool) -> int:
        if draft.person is None:
            raise ValueError("person is required to write a product")
        step = "resolve"
        try:
            with transaction(self.session):
                resolved = self._resolve_references(draft)

                step = "write:product"
                columns = self._product_columns(draft, resolved)
                logger.debug("Writing product", creating=creating, product_id=draft.product_id, columns=columns)
                if creating:
                    product = Product(**columns)
                    self.session.add(product)
                else:
                    product = self.session.get(Product, draft.product_id)
                    if product is None:
                        raise NotFoundError("product", draft.product_id)
                    for column, value in columns.items():
                        setattr(product, column, value)
                    self.session.add(product)
                self.session.flush()
                product_id = product.product_id

                targets = {
                    "symbols": draft.symbols,
                    "synonyms": resolved.synonyms,
                    "hazard_statements": draft.hazard_statements,
                    "precautionary_statements": draft.precautionary_statements,
                }
                for association, target_ids in targets.items():
                    link_model = _ASSOCIATIONS[association][0]
                    step = f"replace:{link_model.__tablename__}"
                    self._replace_links(association, product_id, target_ids)
        except InventoryError as exc:
            logger.error("Product write rolled back", product_id=draft.product_id, step=exc.step, error=str(exc))
            raise
        except SQLAlchemyError as exc:
            logger.error("Product write rolled back", product_id=draft.product_id, step=step, error=str(exc))
            raise WriteError(f"product write failed at {step}", step=step) from exc
        return product_id

    def _resolve_references(self, draft: ProductDraft) -> ResolvedReferences:
        resolve = self.resolver.resolve
        return ResolvedReferences(
            casnumber=resolve(ReferenceKind.CAS_NUMBER, draft.cas_number),
            cenumber=resolve(ReferenceKind.CE_NUMBER, draft.ce_number),
            name=resolve(ReferenceKind.NAME, draft.name),
            synonyms=[resolve(ReferenceKind.NAME, synonym) for synonym in draft.synonyms],
            empiricalformula=resolve(ReferenceKind.EMPIRICAL_FORMULA, draft.empirical_formula),
            classofcompound=resolve(ReferenceKind.CLASS_OF_COMPOUND, draft.class_of_compound),
        )

    @staticmethod
    def _product_columns(draft: ProductDraft, resolved: ResolvedReferences) -> dict:
        supplied = draft.model_fields_set
        columns = {column: getattr(draft, column) for column in SPARSE_COLUMNS if column in supplied}
        if resolved.cenumber is not None:
            columns["cenumber"] = resolved.cenumber
        if resolved.classofcompound is not None:
            columns["classofcompound"] = resolved.classofcompound
        columns["casnumber"] = resolved.casnumber
        columns["name"] = resolved.name
        columns["empiricalformula"] = resolved.empiricalformula
        columns["person"] = draft.person
        return columns

    def _replace_links(self, association: str, product_id: int, target_ids: Iterable[int]) -> None:
        link_model, product_column, target_column = _ASSOCIATIONS[association]
        self.session.exec(delete(link_model).where(getattr(link_model, product_column) == product_id))
        # set semantics: a repeated id is linked once
        for target_id in dict.fromkeys(target_ids):
            self.session.exec(insert(link_model).values({product_column: product_id, target_column: target_id}))

    # Reads

    def get_product(self, product_id: int) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise NotFoundError("product", product_id)
        return product

    def list_products(
        self,
        person_id: int,
        *,
        search: str = "",
        entity_id: Optional[int] = None,
        store_location_id: Optional[int] = None,
        name_id: Optional[int] = None,
        bookmarked_only: bool = False,
        order_by: str = "name",
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Product], int]:
        """Products visible to ``person_id`` and the total count before paging."""
        if order_by not in ORDER_COLUMNS:
            raise ValueError(f"cannot order products by '{order_by}'")

        conditions = [visibility_clause(person_id, ItemClass.PRODUCTS)]
        if search:
            conditions.append(Name.name_label.ilike(f"%{search}%"))
        if name_id is not None:
            conditions.append(Product.name == name_id)
        if entity_id is not None or store_location_id is not None:
            stored = select(Storage.product).join(
                StoreLocation, Storage.storelocation == StoreLocation.storelocation_id
            )
            if entity_id is not None:
                stored = stored.where(StoreLocation.entity == entity_id)
            if store_location_id is not None:
                stored = stored.where(StoreLocation.storelocation_id == store_location_id)
            conditions.append(Product.product_id.in_(stored))
        if bookmarked_only:
            conditions.append(Product.product_id.in_(select(Bookmark.product).where(Bookmark.person == person_id)))

        count_stmt = (
            select(func.count())
            .select_from(Product)
            .join(Name, Product.name == Name.name_id)
            .where(*conditions)
        )
        total = self.session.exec(count_stmt).one()

        order_column = ORDER_COLUMNS[order_by]
        stmt = (
            select(Product)
            .join(Name, Product.name == Name.name_id)
            .where(*conditions)
            .order_by(order_column.desc() if descending else order_column.asc(), Product.product_id)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        products = list(self.session.exec(stmt).all())
        logger.debug("Listed products", person_id=person_id, count=len(products), total=total)
        return products, total

    # Bookmarks

    def is_bookmarked(self, product_id: int, person_id: int) -> bool:
        stmt = select(func.count()).select_from(Bookmark).where(
            Bookmark.product == product_id, Bookmark.person == person_id
        )
        return self.session.exec(stmt).one() != 0

    def create_bookmark(self, product_id: int, person_id: int) -> None:
        try:
            with transaction(self.session):
                self.session.add(Bookmark(product=product_id, person=person_id))
                self.session.flush()
        except SQLAlchemyError as exc:
            raise WriteError(f"could not bookmark product {product_id}", step="write:bookmark") from exc

    def delete_bookmark(self, product_id: int, person_id: int) -> None:
        try:
            with transaction(self.session):
                self.session.exec(
                    delete(Bookmark).where(Bookmark.product == product_id, Bookmark.person == person_id)
                )
        except SQLAlchemyError as exc:
            raise WriteError(f"could not remove bookmark of product {product_id}", step="delete:bookmark") from exc


__all__ = ["ProductDraft", "ProductService", "ExistingReference", "NewReference"]
