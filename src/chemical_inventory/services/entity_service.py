"""Entity management and the manager permission cascade."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field
from sqlalchemy import delete, func, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from chemical_inventory.db import transaction
from chemical_inventory.errors import EntityNotEmptyError, InventoryError, NotFoundError, WriteError
from chemical_inventory.logging import logger
from chemical_inventory.models import Entity, EntityPeople, Permission, Person, PersonEntities
from chemical_inventory.rbac import ItemClass, PermissionLevel, PermissionService, visibility_clause

ORDER_COLUMNS = {
    "name": Entity.entity_name,
    "entity_id": Entity.entity_id,
}


class EntityDraft(BaseModel):
    entity_id: Optional[int] = None
    entity_name: str
    entity_description: Optional[str] = None
    managers: List[int] = Field(default_factory=list)


class EntityService:
    """Entity writes keep each manager's ``all/all/<entity>`` rule in step with the manager list."""

    def __init__(self, session: Session):
        self.session = session
        self.permissions = PermissionService(session)

    def create_entity(self, draft: EntityDraft) -> int:
        step = "write:entity"
        try:
            with transaction(self.session):
                entity = Entity(entity_name=draft.entity_name, entity_description=draft.entity_description)
                self.session.add(entity)
                self.session.flush()
                entity_id = entity.entity_id

                for manager_id in dict.fromkeys(draft.managers):
                    step = "write:entitypeople"
                    self._link_manager(entity_id, manager_id)
                    step = "write:permission"
                    self._assert_manager_rules(entity_id, manager_id)
        except SQLAlchemyError as exc:
            logger.error("Entity create rolled back", entity_name=draft.entity_name, step=step, error=str(exc))
            raise WriteError(f"could not create entity '{draft.entity_name}'", step=step) from exc

        logger.info("Entity created", entity_id=entity_id, managers=draft.managers)
        return entity_id

    def update_entity(self, draft: EntityDraft) -> None:
        """Rewrite the entity and its manager links.

        Links of persons dropped from the manager list are removed; their
        ``all/all/<entity>`` rule is left in place.
        """
        if draft.entity_id is None:
            raise ValueError("entity_id is required to update an entity")
        entity_id = draft.entity_id
        managers = list(dict.fromkeys(draft.managers))

        step = "write:entity"
        try:
            with transaction(self.session):
                entity = self.session.get(Entity, entity_id)
                if entity is None:
                    raise NotFoundError("entity", entity_id)
                entity.entity_name = draft.entity_name
                entity.entity_description = draft.entity_description
                self.session.add(entity)
                self.session.flush()

                step = "delete:entitypeople"
                former = delete(EntityPeople).where(EntityPeople.entitypeople_entity_id == entity_id)
                if managers:
                    former = former.where(EntityPeople.entitypeople_person_id.notin_(managers))
                self.session.exec(former)

                for manager_id in managers:
                    step = "write:entitypeople"
                    self._link_manager(entity_id, manager_id)
                    step = "write:permission"
                    self._assert_manager_rules(entity_id, manager_id)
        except InventoryError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Entity update rolled back", entity_id=entity_id, step=step, error=str(exc))
            raise WriteError(f"could not update entity {entity_id}", step=step) from exc

        logger.info("Entity updated", entity_id=entity_id, managers=managers)

    def delete_entity(self, entity_id: int) -> None:
        step = "read:entity"
        try:
            with transaction(self.session):
                if self.session.get(Entity, entity_id) is None:
                    raise NotFoundError("entity", entity_id)
                if not self.is_entity_empty(entity_id):
                    raise EntityNotEmptyError(entity_id)
                step = "delete:entitypeople"
                self.session.exec(delete(EntityPeople).where(EntityPeople.entitypeople_entity_id == entity_id))
                step = "delete:permission"
                self.session.exec(delete(Permission).where(Permission.permission_entity_id == entity_id))
                step = "delete:entity"
                self.session.exec(delete(Entity).where(Entity.entity_id == entity_id))
        except InventoryError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Entity delete rolled back", entity_id=entity_id, step=step, error=str(exc))
            raise WriteError(f"could not delete entity {entity_id}", step=step) from exc
        logger.info("Entity deleted", entity_id=entity_id)

    def _link_manager(self, entity_id: int, person_id: int) -> None:
        linked = self.session.exec(
            select(EntityPeople).where(
                EntityPeople.entitypeople_entity_id == entity_id,
                EntityPeople.entitypeople_person_id == person_id,
            )
        ).first()
        if linked is None:
            self.session.exec(
                insert(EntityPeople).values(entitypeople_entity_id=entity_id, entitypeople_person_id=person_id)
            )

        member = self.session.exec(
            select(PersonEntities).where(
                PersonEntities.personentities_person_id == person_id,
                PersonEntities.personentities_entity_id == entity_id,
            )
        ).first()
        if member is None:
            self.session.exec(
                insert(PersonEntities).values(personentities_person_id=person_id, personentities_entity_id=entity_id)
            )

    def _assert_manager_rules(self, entity_id: int, person_id: int) -> None:
        # delete-then-insert keeps the derived rule set free of duplicates
        self.permissions.revoke_scoped(person_id, entity_id)
        self.permissions.grant(person_id, PermissionLevel.ALL, ItemClass.ALL, entity_id)

    # Reads

    def get_entity(self, entity_id: int) -> Entity:
        entity = self.session.get(Entity, entity_id)
        if entity is None:
            raise NotFoundError("entity", entity_id)
        return entity

    def get_entity_managers(self, entity_id: int) -> List[Person]:
        stmt = (
            select(Person)
            .join(EntityPeople, EntityPeople.entitypeople_person_id == Person.person_id)
            .where(EntityPeople.entitypeople_entity_id == entity_id)
            .order_by(Person.person_email)
        )
        return list(self.session.exec(stmt).all())

    def is_entity_empty(self, entity_id: int) -> bool:
        stmt = select(func.count()).select_from(PersonEntities).where(
            PersonEntities.personentities_entity_id == entity_id
        )
        return self.session.exec(stmt).one() == 0

    def list_entities(
        self,
        person_id: int,
        *,
        search: str = "",
        order_by: str = "name",
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Entity], int]:
        """Entities ``person_id`` may read and the total count before paging."""
        if order_by not in ORDER_COLUMNS:
            raise ValueError(f"cannot order entities by '{order_by}'")

        conditions = [visibility_clause(person_id, ItemClass.ENTITIES, entity_id=Entity.entity_id)]
        if search:
            conditions.append(Entity.entity_name.ilike(f"%{search}%"))

        total = self.session.exec(select(func.count()).select_from(Entity).where(*conditions)).one()

        order_column = ORDER_COLUMNS[order_by]
        stmt = (
            select(Entity)
            .where(*conditions)
            .order_by(order_column.desc() if descending else order_column.asc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        entities = list(self.session.exec(stmt).all())
        logger.debug("Listed entities", person_id=person_id, count=len(entities), total=total)
        return entities, total


__all__ = ["EntityDraft", "EntityService"]
