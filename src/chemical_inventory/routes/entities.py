"""Entity endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlmodel import Session

from chemical_inventory.auth.dependencies import get_current_person_id, get_session
from chemical_inventory.models import Entity
from chemical_inventory.rbac import ItemClass, PermissionLevel, PermissionService
from chemical_inventory.services import EntityDraft, EntityService

router = APIRouter(prefix="/api/entities", tags=["Entities"])


class ManagerRead(BaseModel):
    person_id: int
    person_email: str


class EntityRead(BaseModel):
    entity_id: int
    entity_name: str
    entity_description: Optional[str] = None
    managers: List[ManagerRead] = []


class EntityPage(BaseModel):
    items: List[EntityRead]
    total: int


class EntityCreated(BaseModel):
    entity_id: int


def _entity_read(entity: Entity) -> EntityRead:
    return EntityRead(
        entity_id=entity.entity_id,
        entity_name=entity.entity_name,
        entity_description=entity.entity_description,
        managers=[
            ManagerRead(person_id=manager.person_id, person_email=manager.person_email)
            for manager in entity.managers
        ],
    )


@router.get("", response_model=EntityPage)
async def list_entities(
    search: str = "",
    sort: str = Query("name", pattern="^(name|entity_id)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> EntityPage:
    entities, total = EntityService(session).list_entities(
        person_id,
        search=search,
        order_by=sort,
        descending=order == "desc",
        limit=limit,
        offset=offset,
    )
    return EntityPage(items=[_entity_read(entity) for entity in entities], total=total)


@router.post("", response_model=EntityCreated, status_code=status.HTTP_201_CREATED)
async def create_entity(
    draft: EntityDraft,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> EntityCreated:
    PermissionService(session).require_permission(person_id, PermissionLevel.WRITE, ItemClass.ENTITIES)
    return EntityCreated(entity_id=EntityService(session).create_entity(draft))


@router.get("/{entity_id}", response_model=EntityRead)
async def get_entity(
    entity_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> EntityRead:
    PermissionService(session).require_permission(
        person_id, PermissionLevel.READ, ItemClass.ENTITIES, entity_id
    )
    return _entity_read(EntityService(session).get_entity(entity_id))


@router.put("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_entity(
    entity_id: int,
    draft: EntityDraft,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> Response:
    PermissionService(session).require_permission(
        person_id, PermissionLevel.WRITE, ItemClass.ENTITIES, entity_id
    )
    EntityService(session).update_entity(draft.model_copy(update={"entity_id": entity_id}))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entity(
    entity_id: int,
    person_id: int = Depends(get_current_person_id),
    session: Session = Depends(get_session),
) -> Response:
    PermissionService(session).require_permission(person_id, PermissionLevel.WRITE, ItemClass.ENTITIES)
    EntityService(session).delete_entity(entity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
