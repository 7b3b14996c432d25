"""Storage-backed permission checks and rule writes."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, exists, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, select

from chemical_inventory.errors import AuthorizationDenied, PermissionLookupError
from chemical_inventory.logging import logger
from chemical_inventory.models import GLOBAL_SCOPE, Entity, Permission
from chemical_inventory.rbac import engine
from chemical_inventory.rbac.engine import Item, ItemClass, Level, PermissionLevel, PermissionRule, plain_value


class PermissionService:
    """Evaluate a person's rules, fetched from the database on every call."""

    def __init__(self, session: Session):
        self.session = session

    def rules_for(self, person_id: int) -> List[PermissionRule]:
        try:
            rows = self.session.exec(select(Permission).where(Permission.person == person_id)).all()
        except SQLAlchemyError as exc:
            logger.error("Permission lookup failed", person_id=person_id, error=str(exc))
            raise PermissionLookupError(
                f"could not read permissions of person {person_id}", step="authorize"
            ) from exc
        return [PermissionRule.from_row(row) for row in rows]

    def has_permission(
        self,
        person_id: int,
        level: Level,
        item_class: Item,
        item_entity_id: int = GLOBAL_SCOPE,
    ) -> bool:
        allowed = engine.has_permission(
            self.rules_for(person_id), person_id, level, item_class, item_entity_id
        )
        logger.debug(
            "Permission check",
            person_id=person_id,
            level=plain_value(level),
            item_class=plain_value(item_class),
            item_entity_id=item_entity_id,
            allowed=allowed,
        )
        return allowed

    def has_permission_in_any_entity(self, person_id: int, level: Level, item_class: Item) -> bool:
        return engine.has_permission_in_any_entity(self.rules_for(person_id), person_id, level, item_class)

    def require_permission(
        self,
        person_id: int,
        level: Level,
        item_class: Item,
        item_entity_id: int = GLOBAL_SCOPE,
    ) -> None:
        if not self.has_permission(person_id, level, item_class, item_entity_id):
            raise AuthorizationDenied(person_id, plain_value(level), plain_value(item_class), item_entity_id)

    def require_permission_in_any_entity(self, person_id: int, level: Level, item_class: Item) -> None:
        if not self.has_permission_in_any_entity(person_id, level, item_class):
            raise AuthorizationDenied(person_id, plain_value(level), plain_value(item_class), GLOBAL_SCOPE)

    def grant(
        self,
        person_id: int,
        level: Level,
        item_class: Item,
        scope_entity: int = GLOBAL_SCOPE,
    ) -> Permission:
        """Add a rule. The caller owns the transaction."""
        rule = Permission(
            person=person_id,
            permission_perm_name=plain_value(level),
            permission_item_name=plain_value(item_class),
            permission_entity_id=scope_entity,
        )
        self.session.add(rule)
        self.session.flush()
        return rule

    def revoke_scoped(self, person_id: int, scope_entity: int) -> None:
        """Drop every rule of the person scoped to the entity. The caller owns the transaction."""
        self.session.exec(
            delete(Permission).where(
                Permission.person == person_id,
                Permission.permission_entity_id == scope_entity,
            )
        )


def visibility_clause(
    person_id: int,
    item_class: Item,
    entity_id: Optional[ColumnElement] = None,
    level: Level = PermissionLevel.READ,
) -> ColumnElement[bool]:
    """SQL form of the three-axis match, for filtering list queries.

    With ``entity_id`` the rule scope must be global or equal to that (usually
    correlated) column. Without it, a rule scoped to any existing entity counts,
    which is how entity-less items such as products are listed.
    """
    if entity_id is not None:
        scope = or_(
            Permission.permission_entity_id == GLOBAL_SCOPE,
            Permission.permission_entity_id == entity_id,
        )
    else:
        scope = or_(
            Permission.permission_entity_id == GLOBAL_SCOPE,
            Permission.permission_entity_id.in_(select(Entity.entity_id)),
        )
    return exists().where(
        Permission.person == person_id,
        Permission.permission_item_name.in_([ItemClass.ALL.value, plain_value(item_class)]),
        Permission.permission_perm_name.in_([PermissionLevel.ALL.value, plain_value(level)]),
        scope,
    )
