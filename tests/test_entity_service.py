from __future__ import annotations

import pytest
from sqlmodel import select

from chemical_inventory.errors import EntityNotEmptyError, NotFoundError, WriteError
from chemical_inventory.models import GLOBAL_SCOPE, Entity, EntityPeople, Permission, PersonEntities
from chemical_inventory.rbac import PermissionService
from chemical_inventory.services import EntityDraft, EntityService


def rules_scoped_to(session, entity_id: int) -> set[tuple]:
    rows = session.exec(select(Permission).where(Permission.permission_entity_id == entity_id)).all()
    return {
        (row.person, row.permission_perm_name, row.permission_item_name, row.permission_entity_id)
        for row in rows
    }


def members_of(session, entity_id: int) -> set[int]:
    stmt = select(PersonEntities.personentities_person_id).where(
        PersonEntities.personentities_entity_id == entity_id
    )
    return set(session.exec(stmt).all())


def manager_ids(service: EntityService, entity_id: int) -> set[int]:
    return {person.person_id for person in service.get_entity_managers(entity_id)}


def test_create_entity_grants_each_manager_one_rule(session, people):
    service = EntityService(session)

    entity_id = service.create_entity(
        EntityDraft(entity_name="PHYSICS", managers=[people.alice, people.bob, people.alice])
    )

    assert rules_scoped_to(session, entity_id) == {
        (people.alice, "all", "all", entity_id),
        (people.bob, "all", "all", entity_id),
    }
    assert len(session.exec(select(Permission)).all()) == 2
    assert manager_ids(service, entity_id) == {people.alice, people.bob}
    assert members_of(session, entity_id) == {people.alice, people.bob}

    permissions = PermissionService(session)
    assert permissions.has_permission(people.alice, "w", "storages", entity_id)
    assert not permissions.has_permission(people.alice, "w", "storages", GLOBAL_SCOPE)


def test_update_rewrites_manager_rules(session, people):
    service = EntityService(session)
    entity_id = service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice]))
    permissions = PermissionService(session)
    permissions.grant(people.alice, "r", "products", entity_id)
    permissions.grant(people.alice, "r", "entities")
    session.commit()

    service.update_entity(
        EntityDraft(
            entity_id=entity_id,
            entity_name="APPLIED PHYSICS",
            entity_description="optics",
            managers=[people.alice, people.carol],
        )
    )

    assert rules_scoped_to(session, entity_id) == {
        (people.alice, "all", "all", entity_id),
        (people.carol, "all", "all", entity_id),
    }
    assert rules_scoped_to(session, GLOBAL_SCOPE) == {(people.alice, "r", "entities", GLOBAL_SCOPE)}
    entity = service.get_entity(entity_id)
    assert entity.entity_name == "APPLIED PHYSICS"
    assert entity.entity_description == "optics"


def test_update_removes_former_manager_links_but_keeps_their_rule(session, people):
    service = EntityService(session)
    entity_id = service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice, people.bob]))

    service.update_entity(EntityDraft(entity_id=entity_id, entity_name="PHYSICS", managers=[people.alice]))

    assert manager_ids(service, entity_id) == {people.alice}
    assert (people.bob, "all", "all", entity_id) in rules_scoped_to(session, entity_id)
    assert PermissionService(session).has_permission(people.bob, "w", "entities", entity_id)


def test_update_with_no_managers_drops_every_link(session, people):
    service = EntityService(session)
    entity_id = service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice, people.bob]))

    service.update_entity(EntityDraft(entity_id=entity_id, entity_name="PHYSICS", managers=[]))

    assert manager_ids(service, entity_id) == set()
    assert members_of(session, entity_id) == {people.alice, people.bob}


def test_update_unknown_entity(session):
    service = EntityService(session)

    with pytest.raises(NotFoundError):
        service.update_entity(EntityDraft(entity_id=404, entity_name="NOWHERE"))
    with pytest.raises(ValueError):
        service.update_entity(EntityDraft(entity_name="NOWHERE"))


def test_create_failure_leaves_nothing_behind(session, people):
    service = EntityService(session)
    service.create_entity(EntityDraft(entity_name="PHYSICS"))

    with pytest.raises(WriteError) as excinfo:
        service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice]))

    assert excinfo.value.step == "write:entity"
    assert session.exec(select(Permission)).all() == []
    assert session.exec(select(EntityPeople)).all() == []


def test_unknown_manager_rolls_back_the_entity(session, people):
    service = EntityService(session)

    with pytest.raises(WriteError) as excinfo:
        service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice, 404]))

    assert excinfo.value.step == "write:entitypeople"
    assert session.exec(select(Entity).where(Entity.entity_name == "PHYSICS")).first() is None
    assert session.exec(select(Permission)).all() == []


def test_delete_entity(session, people):
    service = EntityService(session)
    staffed = service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice]))
    empty = service.create_entity(EntityDraft(entity_name="ARCHIVE"))
    PermissionService(session).grant(people.bob, "r", "storages", empty)
    session.commit()

    assert not service.is_entity_empty(staffed)
    assert service.is_entity_empty(empty)
    with pytest.raises(EntityNotEmptyError):
        service.delete_entity(staffed)

    service.delete_entity(empty)

    assert rules_scoped_to(session, empty) == set()
    with pytest.raises(NotFoundError):
        service.get_entity(empty)
    with pytest.raises(NotFoundError):
        service.delete_entity(empty)


def test_list_entities_follows_rules(session, people, labs):
    service = EntityService(session)
    physics = service.create_entity(EntityDraft(entity_name="PHYSICS", managers=[people.alice]))
    PermissionService(session).grant(people.admin, "all", "all")
    session.commit()

    entities, total = service.list_entities(people.alice)
    assert [entity.entity_id for entity in entities] == [physics]
    assert total == 1
    assert [manager.person_id for manager in entities[0].managers] == [people.alice]

    entities, total = service.list_entities(people.admin)
    assert [entity.entity_name for entity in entities] == ["BIOLOGY", "CHEMISTRY", "PHYSICS"]
    assert total == 3

    entities, total = service.list_entities(people.admin, search="chem", descending=True)
    assert [entity.entity_id for entity in entities] == [labs.chemistry]

    assert service.list_entities(people.bob) == ([], 0)
