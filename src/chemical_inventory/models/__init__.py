"""Database models for the chemical inventory.

Table and column names follow the historical relational layout so that
existing databases can be opened as they are.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import DateTime, Index, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

GLOBAL_SCOPE = -1


# 1. People, entities and permission rules

class EntityPeople(SQLModel, table=True):
    """Manager link between an entity and a person."""

    __tablename__ = "entitypeople"

    entitypeople_entity_id: int = Field(foreign_key="entity.entity_id", primary_key=True)
    entitypeople_person_id: int = Field(foreign_key="person.person_id", primary_key=True)


class PersonEntities(SQLModel, table=True):
    """Membership link: the person belongs to the entity."""

    __tablename__ = "personentities"

    personentities_person_id: int = Field(foreign_key="person.person_id", primary_key=True)
    personentities_entity_id: int = Field(foreign_key="entity.entity_id", primary_key=True)


class Person(SQLModel, table=True):
    __tablename__ = "person"

    person_id: Optional[int] = Field(default=None, primary_key=True)
    person_email: str = Field(unique=True, index=True)

    entities: List["Entity"] = Relationship(back_populates="members", link_model=PersonEntities)


class Entity(SQLModel, table=True):
    """Organizational unit (a lab) owning store locations."""

    __tablename__ = "entity"

    entity_id: Optional[int] = Field(default=None, primary_key=True)
    entity_name: str = Field(unique=True, index=True)
    entity_description: Optional[str] = None

    managers: List[Person] = Relationship(link_model=EntityPeople)
    members: List[Person] = Relationship(back_populates="entities", link_model=PersonEntities)
    store_locations: List["StoreLocation"] = Relationship(back_populates="entity_ref")


class Permission(SQLModel, table=True):
    """A grant tuple. ``permission_entity_id`` is ``-1`` for global rules."""

    __tablename__ = "permission"
    __table_args__ = (
        Index("ix_permission_person_entity", "person", "permission_entity_id"),
    )

    permission_id: Optional[int] = Field(default=None, primary_key=True)
    person: int = Field(foreign_key="person.person_id")
    permission_perm_name: str
    permission_item_name: str
    permission_entity_id: int = Field(default=GLOBAL_SCOPE)


# 2. Product lookup tables

class CasNumber(SQLModel, table=True):
    __tablename__ = "casnumber"

    casnumber_id: Optional[int] = Field(default=None, primary_key=True)
    casnumber_label: str = Field(index=True)


class CeNumber(SQLModel, table=True):
    __tablename__ = "cenumber"

    cenumber_id: Optional[int] = Field(default=None, primary_key=True)
    cenumber_label: str = Field(index=True)


class Name(SQLModel, table=True):
    """Canonical names and synonyms share this table."""

    __tablename__ = "name"

    name_id: Optional[int] = Field(default=None, primary_key=True)
    name_label: str = Field(index=True)


class EmpiricalFormula(SQLModel, table=True):
    __tablename__ = "empiricalformula"

    empiricalformula_id: Optional[int] = Field(default=None, primary_key=True)
    empiricalformula_label: str = Field(index=True)


class ClassOfCompound(SQLModel, table=True):
    __tablename__ = "classofcompound"

    classofcompound_id: Optional[int] = Field(default=None, primary_key=True)
    classofcompound_label: str = Field(index=True)


class PhysicalState(SQLModel, table=True):
    __tablename__ = "physicalstate"

    physicalstate_id: Optional[int] = Field(default=None, primary_key=True)
    physicalstate_label: str


class SignalWord(SQLModel, table=True):
    __tablename__ = "signalword"

    signalword_id: Optional[int] = Field(default=None, primary_key=True)
    signalword_label: str


class Symbol(SQLModel, table=True):
    """GHS pictogram."""

    __tablename__ = "symbol"

    symbol_id: Optional[int] = Field(default=None, primary_key=True)
    symbol_label: str
    symbol_image: Optional[str] = None


class HazardStatement(SQLModel, table=True):
    __tablename__ = "hazardstatement"

    hazardstatement_id: Optional[int] = Field(default=None, primary_key=True)
    hazardstatement_label: str
    hazardstatement_reference: str


class PrecautionaryStatement(SQLModel, table=True):
    __tablename__ = "precautionarystatement"

    precautionarystatement_id: Optional[int] = Field(default=None, primary_key=True)
    precautionarystatement_label: str
    precautionarystatement_reference: str


# 3. Product aggregate and its association sets

class ProductSymbols(SQLModel, table=True):
    __tablename__ = "productsymbols"

    productsymbols_product_id: int = Field(foreign_key="product.product_id", primary_key=True)
    productsymbols_symbol_id: int = Field(foreign_key="symbol.symbol_id", primary_key=True)


class ProductSynonyms(SQLModel, table=True):
    __tablename__ = "productsynonyms"

    productsynonyms_product_id: int = Field(foreign_key="product.product_id", primary_key=True)
    productsynonyms_name_id: int = Field(foreign_key="name.name_id", primary_key=True)


class ProductHazardStatements(SQLModel, table=True):
    __tablename__ = "producthazardstatements"

    producthazardstatements_product_id: int = Field(foreign_key="product.product_id", primary_key=True)
    producthazardstatements_hazardstatement_id: int = Field(
        foreign_key="hazardstatement.hazardstatement_id", primary_key=True
    )


class ProductPrecautionaryStatements(SQLModel, table=True):
    __tablename__ = "productprecautionarystatements"

    productprecautionarystatements_product_id: int = Field(foreign_key="product.product_id", primary_key=True)
    productprecautionarystatements_precautionarystatement_id: int = Field(
        foreign_key="precautionarystatement.precautionarystatement_id", primary_key=True
    )


class Product(SQLModel, table=True):
    """Chemical substance with its regulatory metadata."""

    __tablename__ = "product"

    product_id: Optional[int] = Field(default=None, primary_key=True)
    product_specificity: Optional[str] = None
    product_msds: Optional[str] = None
    product_restricted: Optional[bool] = None
    product_radioactive: Optional[bool] = None
    product_linearformula: Optional[str] = None
    product_threedformula: Optional[str] = None
    product_disposalcomment: Optional[str] = None
    product_remark: Optional[str] = None

    casnumber: int = Field(foreign_key="casnumber.casnumber_id")
    cenumber: Optional[int] = Field(default=None, foreign_key="cenumber.cenumber_id")
    name: int = Field(foreign_key="name.name_id", index=True)
    empiricalformula: int = Field(foreign_key="empiricalformula.empiricalformula_id")
    physicalstate: Optional[int] = Field(default=None, foreign_key="physicalstate.physicalstate_id")
    signalword: Optional[int] = Field(default=None, foreign_key="signalword.signalword_id")
    classofcompound: Optional[int] = Field(default=None, foreign_key="classofcompound.classofcompound_id")
    person: int = Field(foreign_key="person.person_id")

    cas_number: Optional[CasNumber] = Relationship()
    ce_number: Optional[CeNumber] = Relationship()
    product_name: Optional[Name] = Relationship()
    empirical_formula: Optional[EmpiricalFormula] = Relationship()
    physical_state: Optional[PhysicalState] = Relationship()
    signal_word: Optional[SignalWord] = Relationship()
    class_of_compound: Optional[ClassOfCompound] = Relationship()
    owner: Optional[Person] = Relationship()

    symbols: List[Symbol] = Relationship(link_model=ProductSymbols)
    synonyms: List[Name] = Relationship(link_model=ProductSynonyms)
    hazard_statements: List[HazardStatement] = Relationship(link_model=ProductHazardStatements)
    precautionary_statements: List[PrecautionaryStatement] = Relationship(
        link_model=ProductPrecautionaryStatements
    )


class Bookmark(SQLModel, table=True):
    __tablename__ = "bookmark"
    __table_args__ = (
        UniqueConstraint("person", "product", name="uq_bookmark_person_product"),
    )

    bookmark_id: Optional[int] = Field(default=None, primary_key=True)
    person: int = Field(foreign_key="person.person_id")
    product: int = Field(foreign_key="product.product_id")


# 4. Physical stock

class StoreLocation(SQLModel, table=True):
    __tablename__ = "storelocation"

    storelocation_id: Optional[int] = Field(default=None, primary_key=True)
    storelocation_name: str
    entity: int = Field(foreign_key="entity.entity_id")

    entity_ref: Optional[Entity] = Relationship(back_populates="store_locations")


class Unit(SQLModel, table=True):
    __tablename__ = "unit"

    unit_id: Optional[int] = Field(default=None, primary_key=True)
    unit_label: str


class Storage(SQLModel, table=True):
    """A stock record of a product at a store location."""

    __tablename__ = "storage"
    __table_args__ = (
        Index("ix_storage_product_location_unit", "product", "storelocation", "unit"),
    )

    storage_id: Optional[int] = Field(default=None, primary_key=True)
    product: int = Field(foreign_key="product.product_id")
    storelocation: int = Field(foreign_key="storelocation.storelocation_id")
    unit: int = Field(foreign_key="unit.unit_id")
    storage_quantity: float
    storage_batchnumber: Optional[str] = None
    storage_entrydate: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    storage_exitdate: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    storage_openingdate: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    storage_expirationdate: Optional[date] = None
    storage_comment: Optional[str] = None
    storage_borrowedby: Optional[int] = Field(default=None, foreign_key="person.person_id")


metadata = SQLModel.metadata

__all__ = [
    "GLOBAL_SCOPE",
    "Bookmark",
    "CasNumber",
    "CeNumber",
    "ClassOfCompound",
    "EmpiricalFormula",
    "Entity",
    "EntityPeople",
    "HazardStatement",
    "Name",
    "Permission",
    "Person",
    "PersonEntities",
    "PhysicalState",
    "PrecautionaryStatement",
    "Product",
    "ProductHazardStatements",
    "ProductPrecautionaryStatements",
    "ProductSymbols",
    "ProductSynonyms",
    "SignalWord",
    "Storage",
    "StoreLocation",
    "Symbol",
    "Unit",
    "metadata",
]
