"""Permission engine: rule evaluation and storage-backed checks."""

from __future__ import annotations

from chemical_inventory.rbac.engine import (
    ItemClass,
    PermissionLevel,
    PermissionRule,
    has_permission,
    has_permission_in_any_entity,
    rule_matches,
)
from chemical_inventory.rbac.service import PermissionService, visibility_clause

__all__ = [
    "ItemClass",
    "PermissionLevel",
    "PermissionRule",
    "PermissionService",
    "has_permission",
    "has_permission_in_any_entity",
    "rule_matches",
    "visibility_clause",
]
