from __future__ import annotations

import pytest
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from chemical_inventory.errors import ReferenceResolutionError
from chemical_inventory.models import CasNumber, ClassOfCompound, Name
from chemical_inventory.services import (
    ExistingReference,
    NewReference,
    ProductDraft,
    ReferenceKind,
    ReferenceResolver,
    reference_from_sentinel,
)


def count(session, model) -> int:
    return session.exec(select(func.count()).select_from(model)).one()


def test_existing_reference_is_returned_without_writes(session):
    resolver = ReferenceResolver(session)
    first = resolver.resolve(ReferenceKind.CAS_NUMBER, NewReference(label="64-17-5"))
    session.commit()

    again = resolver.resolve(ReferenceKind.CAS_NUMBER, ExistingReference(id=first))
    once_more = resolver.resolve(ReferenceKind.CAS_NUMBER, ExistingReference(id=first))

    assert again == once_more == first
    assert count(session, CasNumber) == 1


def test_new_references_always_create_rows(session):
    resolver = ReferenceResolver(session)

    first = resolver.resolve(ReferenceKind.CAS_NUMBER, NewReference(label="64-17-5"))
    second = resolver.resolve(ReferenceKind.CAS_NUMBER, NewReference(label="67-64-1"))
    duplicate = resolver.resolve(ReferenceKind.CAS_NUMBER, NewReference(label="64-17-5"))

    assert len({first, second, duplicate}) == 3
    assert count(session, CasNumber) == 3


def test_name_labels_are_upper_cased(session):
    resolver = ReferenceResolver(session)

    name_id = resolver.resolve(ReferenceKind.NAME, NewReference(label="Ethanol"))
    class_id = resolver.resolve(ReferenceKind.CLASS_OF_COMPOUND, NewReference(label="Alcohols"))

    assert session.get(Name, name_id).name_label == "ETHANOL"
    assert session.get(ClassOfCompound, class_id).classofcompound_label == "Alcohols"


def test_absent_reference(session):
    resolver = ReferenceResolver(session)

    assert resolver.resolve(ReferenceKind.CE_NUMBER, None) is None
    assert resolver.resolve(ReferenceKind.CLASS_OF_COMPOUND, None) is None
    with pytest.raises(ValueError):
        resolver.resolve(ReferenceKind.NAME, None)


def test_insert_failure_names_the_kind(session, monkeypatch):
    resolver = ReferenceResolver(session)

    def failing_flush(*args, **kwargs):
        raise IntegrityError("INSERT INTO cenumber", {}, Exception("constraint failed"))

    monkeypatch.setattr(session, "flush", failing_flush)

    with pytest.raises(ReferenceResolutionError) as excinfo:
        resolver.resolve(ReferenceKind.CE_NUMBER, NewReference(label="200-578-6"))

    assert excinfo.value.kind == "cenumber"
    assert excinfo.value.step == "resolve:cenumber"


def test_sentinel_identifiers_map_to_reference_variants():
    assert reference_from_sentinel(None) is None
    assert reference_from_sentinel(-1, "acetone") == NewReference(label="acetone")
    assert reference_from_sentinel(12, "ignored") == ExistingReference(id=12)


def test_draft_decodes_tagged_references():
    draft = ProductDraft.model_validate(
        {
            "cas_number": {"status": "existing", "id": 3},
            "name": {"status": "new", "label": "acetone"},
            "empirical_formula": {"status": "new", "label": "C3H6O"},
            "synonyms": [{"status": "new", "label": "propanone"}, {"status": "existing", "id": 9}],
            "person": 1,
        }
    )

    assert draft.cas_number == ExistingReference(id=3)
    assert draft.name == NewReference(label="acetone")
    assert draft.ce_number is None
    assert draft.synonyms[1] == ExistingReference(id=9)
    assert "product_remark" not in draft.model_fields_set
