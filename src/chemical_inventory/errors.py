"""Error taxonomy shared by the permission engine and the write services."""

from __future__ import annotations

from typing import Any, Optional


class InventoryError(Exception):
    """Base error. ``step`` names the operation step that failed."""

    def __init__(self, message: str, *, step: Optional[str] = None):
        super().__init__(message)
        self.step = step


class AuthorizationDenied(InventoryError):
    """No permission rule grants the requested access."""

    def __init__(self, person_id: int, level: str, item_class: str, item_entity_id: int):
        super().__init__(
            f"person {person_id} has no '{level}' permission on '{item_class}' "
            f"for entity {item_entity_id}",
            step="authorize",
        )
        self.person_id = person_id
        self.level = level
        self.item_class = item_class
        self.item_entity_id = item_entity_id


class PermissionLookupError(InventoryError):
    """Permission rules could not be read. Never means 'access denied'."""


class ReferenceResolutionError(InventoryError):
    """Inserting a new lookup row failed."""

    def __init__(self, kind: str, label: Optional[str]):
        super().__init__(f"could not create {kind} '{label}'", step=f"resolve:{kind}")
        self.kind = kind
        self.label = label


class WriteError(InventoryError):
    """A product, association or entity write failed."""


class NotFoundError(InventoryError):
    def __init__(self, kind: str, identifier: Any):
        super().__init__(f"{kind} {identifier} not found", step=f"read:{kind}")
        self.kind = kind
        self.identifier = identifier


class EntityNotEmptyError(InventoryError):
    def __init__(self, entity_id: int):
        super().__init__(f"entity {entity_id} still has members", step="delete:entity")
        self.entity_id = entity_id


__all__ = [
    "InventoryError",
    "AuthorizationDenied",
    "PermissionLookupError",
    "ReferenceResolutionError",
    "WriteError",
    "NotFoundError",
    "EntityNotEmptyError",
]
