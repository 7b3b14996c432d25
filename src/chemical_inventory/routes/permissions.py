"""Permission check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chemical_inventory.auth.dependencies import get_current_person_id, get_permission_service
from chemical_inventory.rbac import ItemClass, PermissionLevel, PermissionService

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


class PermissionCheckResponse(BaseModel):
    person_id: int
    level: PermissionLevel
    item_class: ItemClass
    item_entity_id: int
    allowed: bool


@router.get("/{person_id}/{level}/{item_class}/{item_entity_id}", response_model=PermissionCheckResponse)
async def check_permission(
    person_id: int,
    level: PermissionLevel,
    item_class: ItemClass,
    item_entity_id: int,
    current_person_id: int = Depends(get_current_person_id),
    permissions: PermissionService = Depends(get_permission_service),
) -> PermissionCheckResponse:
    """Whether ``person_id`` may act at ``level`` on ``item_class`` within ``item_entity_id`` (-1 for global)."""
    return PermissionCheckResponse(
        person_id=person_id,
        level=level,
        item_class=item_class,
        item_entity_id=item_entity_id,
        allowed=permissions.has_permission(person_id, level, item_class, item_entity_id),
    )
