"""Request authentication."""

from chemical_inventory.auth.dependencies import (
    get_current_person_id,
    get_permission_service,
    get_session,
    get_token_verifier,
)
from chemical_inventory.auth.tokens import TokenVerifier

__all__ = [
    "TokenVerifier",
    "get_current_person_id",
    "get_permission_service",
    "get_session",
    "get_token_verifier",
]
