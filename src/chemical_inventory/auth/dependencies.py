"""Authentication dependencies for FastAPI."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from chemical_inventory.auth.tokens import TokenVerifier
from chemical_inventory.db import session_scope
from chemical_inventory.rbac import PermissionService

security = HTTPBearer()


def get_session():
    """Get database session."""
    with session_scope() as session:
        yield session


def get_token_verifier() -> TokenVerifier:
    return TokenVerifier()


def get_current_person_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> int:
    """Id of the authenticated person."""
    person_id = verifier.person_id(credentials.credentials)
    if person_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return person_id


def get_permission_service(session: Session = Depends(get_session)) -> PermissionService:
    return PermissionService(session)
