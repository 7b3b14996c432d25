"""Permission rule evaluation.

A rule grants access when it matches on three independent axes:

* item class: the rule's class is ``all`` or equals the requested class
* level: the rule's level is ``all`` or equals the requested level
* scope: the rule is global (``-1``) or scoped to the requested entity

Rules only ever grant. Access is the union of all of a person's rules, so the
first matching rule decides and there is no ordering between them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

from chemical_inventory.models import GLOBAL_SCOPE, Permission


class PermissionLevel(str, Enum):
    ALL = "all"
    READ = "r"
    WRITE = "w"


class ItemClass(str, Enum):
    ALL = "all"
    ENTITIES = "entities"
    PRODUCTS = "products"
    STORAGES = "storages"
    STORE_LOCATIONS = "storelocations"
    PEOPLE = "people"


Level = Union[PermissionLevel, str]
Item = Union[ItemClass, str]


def plain_value(value: Union[Enum, str]) -> str:
    """The stored string for a level or item class given as an enum member or raw string."""
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True, slots=True)
class PermissionRule:
    subject: int
    item_class: str
    level: str
    scope_entity: int = GLOBAL_SCOPE

    @classmethod
    def from_row(cls, row: Permission) -> "PermissionRule":
        return cls(
            subject=row.person,
            item_class=row.permission_item_name,
            level=row.permission_perm_name,
            scope_entity=row.permission_entity_id,
        )

    @property
    def is_global(self) -> bool:
        return self.scope_entity == GLOBAL_SCOPE


def rule_matches(rule: PermissionRule, level: Level, item_class: Item, item_entity_id: int) -> bool:
    return (
        rule.item_class in (ItemClass.ALL.value, plain_value(item_class))
        and rule.level in (PermissionLevel.ALL.value, plain_value(level))
        and (rule.is_global or rule.scope_entity == item_entity_id)
    )


def has_permission(
    rules: Iterable[PermissionRule],
    person_id: int,
    level: Level,
    item_class: Item,
    item_entity_id: int = GLOBAL_SCOPE,
) -> bool:
    return any(
        rule.subject == person_id and rule_matches(rule, level, item_class, item_entity_id)
        for rule in rules
    )


def has_permission_in_any_entity(
    rules: Iterable[PermissionRule],
    person_id: int,
    level: Level,
    item_class: Item,
) -> bool:
    """Like :func:`has_permission`, ignoring the scope axis."""
    return any(
        rule.subject == person_id
        and rule.item_class in (ItemClass.ALL.value, plain_value(item_class))
        and rule.level in (PermissionLevel.ALL.value, plain_value(level))
        for rule in rules
    )


__all__ = [
    "ItemClass",
    "PermissionLevel",
    "PermissionRule",
    "has_permission",
    "has_permission_in_any_entity",
    "plain_value",
    "rule_matches",
]
