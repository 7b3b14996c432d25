from __future__ import annotations

import itertools
import random

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from chemical_inventory.errors import AuthorizationDenied, PermissionLookupError
from chemical_inventory.models import GLOBAL_SCOPE, Entity
from chemical_inventory.rbac import (
    ItemClass,
    PermissionLevel,
    PermissionRule,
    PermissionService,
    has_permission,
    has_permission_in_any_entity,
    visibility_clause,
)
from chemical_inventory.rbac.engine import plain_value

LEVELS = [level.value for level in PermissionLevel]
ITEM_CLASSES = [item.value for item in ItemClass]
SCOPES = [GLOBAL_SCOPE, 1, 2, 3]
REQUEST_ENTITIES = [GLOBAL_SCOPE, 1, 2, 3, 4]
SUBJECTS = [1, 2]


def random_rules(rng: random.Random, subjects=SUBJECTS, scopes=SCOPES) -> list[PermissionRule]:
    return [
        PermissionRule(
            subject=rng.choice(subjects),
            item_class=rng.choice(ITEM_CLASSES),
            level=rng.choice(LEVELS),
            scope_entity=rng.choice(scopes),
        )
        for _ in range(rng.randint(0, 6))
    ]


def granted_requests(rules: list[PermissionRule]) -> set[tuple]:
    """Expand every rule into the concrete requests it allows."""
    granted = set()
    for rule in rules:
        levels = LEVELS if rule.level == "all" else [rule.level]
        classes = ITEM_CLASSES if rule.item_class == "all" else [rule.item_class]
        entities = REQUEST_ENTITIES if rule.scope_entity == GLOBAL_SCOPE else [rule.scope_entity]
        granted.update(itertools.product([rule.subject], levels, classes, entities))
    return granted


def test_random_rule_sets_match_expanded_grants():
    rng = random.Random(20240611)
    for _ in range(300):
        rules = random_rules(rng)
        granted = granted_requests(rules)
        for request in itertools.product(SUBJECTS, LEVELS, ITEM_CLASSES, REQUEST_ENTITIES):
            assert has_permission(rules, *request) == (request in granted), (rules, request)


def test_global_wildcard_rule_grants_everything():
    rules = [PermissionRule(subject=1, item_class="all", level="all")]

    assert has_permission(rules, 1, PermissionLevel.WRITE, ItemClass.STORAGES, 42)
    assert has_permission(rules, 1, "r", "entities")
    assert not has_permission(rules, 2, "r", "entities")


def test_scoped_rule_does_not_leak_to_other_entities_or_global_requests():
    rules = [PermissionRule(subject=1, item_class="products", level="w", scope_entity=2)]

    assert has_permission(rules, 1, "w", "products", 2)
    assert not has_permission(rules, 1, "w", "products", 3)
    assert not has_permission(rules, 1, "w", "products", GLOBAL_SCOPE)
    assert not has_permission(rules, 1, "r", "products", 2)
    assert not has_permission(rules, 1, "w", "storages", 2)


def test_any_entity_ignores_scope_axis():
    rules = [PermissionRule(subject=1, item_class="products", level="w", scope_entity=7)]

    assert has_permission_in_any_entity(rules, 1, "w", "products")
    assert not has_permission_in_any_entity(rules, 1, "r", "products")
    assert not has_permission_in_any_entity(rules, 2, "w", "products")


def test_enum_members_and_raw_strings_share_stored_names():
    assert plain_value(PermissionLevel.WRITE) == plain_value("w") == "w"
    assert plain_value(ItemClass.STORAGES) == "storages"


def test_service_reads_rules_on_every_call(session, people, labs):
    permissions = PermissionService(session)
    assert not permissions.has_permission(people.alice, "r", "products", labs.chemistry)

    permissions.grant(people.alice, PermissionLevel.READ, ItemClass.PRODUCTS, labs.chemistry)
    session.commit()

    assert permissions.has_permission(people.alice, "r", "products", labs.chemistry)
    assert not permissions.has_permission(people.alice, "r", "products", labs.biology)
    assert permissions.rules_for(people.alice) == [
        PermissionRule(subject=people.alice, item_class="products", level="r", scope_entity=labs.chemistry)
    ]


def test_require_permission_raises_denial(session, people):
    permissions = PermissionService(session)

    with pytest.raises(AuthorizationDenied) as excinfo:
        permissions.require_permission(people.bob, PermissionLevel.WRITE, ItemClass.ENTITIES)

    assert excinfo.value.step == "authorize"
    assert excinfo.value.level == "w"
    assert excinfo.value.item_class == "entities"


def test_lookup_failure_is_not_reported_as_denial(session, people, monkeypatch):
    permissions = PermissionService(session)

    def broken_exec(*args, **kwargs):
        raise OperationalError("SELECT permission", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "exec", broken_exec)

    with pytest.raises(PermissionLookupError):
        permissions.has_permission(people.alice, "r", "products")
    with pytest.raises(PermissionLookupError):
        permissions.require_permission(people.alice, "r", "products")


def test_revoke_scoped_keeps_global_and_other_entity_rules(session, people, labs):
    permissions = PermissionService(session)
    permissions.grant(people.alice, "all", "all", labs.chemistry)
    permissions.grant(people.alice, "r", "storages", labs.chemistry)
    permissions.grant(people.alice, "r", "storages", labs.biology)
    permissions.grant(people.alice, "r", "entities")

    permissions.revoke_scoped(people.alice, labs.chemistry)
    session.commit()

    assert sorted(rule.scope_entity for rule in permissions.rules_for(people.alice)) == [
        GLOBAL_SCOPE,
        labs.biology,
    ]


def test_entity_visibility_agrees_with_rule_evaluation(session, people):
    entity_ids = []
    for name in ("A", "B", "C"):
        entity = Entity(entity_name=name)
        session.add(entity)
        session.flush()
        entity_ids.append(entity.entity_id)
    session.commit()

    rng = random.Random(7)
    permissions = PermissionService(session)
    for _ in range(25):
        for rule in random_rules(rng, subjects=[people.alice], scopes=[GLOBAL_SCOPE, *entity_ids]):
            permissions.grant(rule.subject, rule.level, rule.item_class, rule.scope_entity)
        session.commit()

        rules = permissions.rules_for(people.alice)
        expected = {
            entity_id
            for entity_id in entity_ids
            if has_permission(rules, people.alice, "r", "entities", entity_id)
        }
        visible = set(
            session.exec(
                select(Entity.entity_id).where(
                    visibility_clause(people.alice, ItemClass.ENTITIES, entity_id=Entity.entity_id)
                )
            ).all()
        )
        assert visible == expected

        for entity_id in [GLOBAL_SCOPE, *entity_ids]:
            permissions.revoke_scoped(people.alice, entity_id)
        session.commit()
