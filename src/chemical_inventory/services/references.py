"""Create-or-reuse resolution of product lookup rows."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Type, Union

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from chemical_inventory.errors import ReferenceResolutionError
from chemical_inventory.logging import logger
from chemical_inventory.models import CasNumber, CeNumber, ClassOfCompound, EmpiricalFormula, Name

SENTINEL_NEW = -1


class ExistingReference(BaseModel):
    """Points at a lookup row that already exists."""

    status: Literal["existing"] = "existing"
    id: int


class NewReference(BaseModel):
    """A label with no row yet; resolving it creates one."""

    status: Literal["new"] = "new"
    label: str


Reference = Annotated[Union[ExistingReference, NewReference], Field(discriminator="status")]


class ReferenceKind(str, Enum):
    CAS_NUMBER = "casnumber"
    CE_NUMBER = "cenumber"
    NAME = "name"
    EMPIRICAL_FORMULA = "empiricalformula"
    CLASS_OF_COMPOUND = "classofcompound"

    @property
    def model(self) -> Type[SQLModel]:
        return _KIND_MODELS[self]

    @property
    def mandatory(self) -> bool:
        return self in (ReferenceKind.CAS_NUMBER, ReferenceKind.NAME, ReferenceKind.EMPIRICAL_FORMULA)


_KIND_MODELS = {
    ReferenceKind.CAS_NUMBER: CasNumber,
    ReferenceKind.CE_NUMBER: CeNumber,
    ReferenceKind.NAME: Name,
    ReferenceKind.EMPIRICAL_FORMULA: EmpiricalFormula,
    ReferenceKind.CLASS_OF_COMPOUND: ClassOfCompound,
}


def reference_from_sentinel(
    identifier: Optional[int], label: Optional[str] = None
) -> Union[ExistingReference, NewReference, None]:
    """Translate the ``-1 means new`` convention into a reference variant."""
    if identifier is None:
        return None
    if identifier == SENTINEL_NEW:
        return NewReference(label=label or "")
    return ExistingReference(id=identifier)


class ReferenceResolver:
    """Turns references into row ids inside the caller's transaction.

    New rows are flushed, never committed: a failure later in the caller's
    transaction rolls them back with everything else.
    """

    def __init__(self, session: Session):
        self.session = session

    def resolve(
        self,
        kind: ReferenceKind,
        reference: Union[ExistingReference, NewReference, None],
    ) -> Optional[int]:
        if reference is None:
            if kind.mandatory:
                raise ValueError(f"{kind.value} reference is mandatory")
            return None

        if isinstance(reference, ExistingReference):
            return reference.id

        label = reference.label
        # names and synonyms are stored upper-cased
        if kind is ReferenceKind.NAME:
            label = label.upper()

        row = kind.model(**{f"{kind.value}_label": label})
        try:
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise ReferenceResolutionError(kind.value, label) from exc

        identifier = getattr(row, f"{kind.value}_id")
        logger.debug("Created lookup row", kind=kind.value, label=label, id=identifier)
        return identifier


__all__ = [
    "SENTINEL_NEW",
    "ExistingReference",
    "NewReference",
    "Reference",
    "ReferenceKind",
    "ReferenceResolver",
    "reference_from_sentinel",
]
