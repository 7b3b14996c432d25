"""Bearer token verification."""

from __future__ import annotations

from typing import Optional

import jwt

from chemical_inventory.config import get_settings
from chemical_inventory.logging import logger


class TokenVerifier:
    """Verifies signed tokens whose ``sub`` claim is the acting person's id."""

    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        security_settings = get_settings().security
        self.secret_key = secret_key or security_settings.jwt_secret
        self.algorithm = algorithm or security_settings.jwt_algorithm

    def person_id(self, token: str) -> Optional[int]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired token")
            return None
        except jwt.InvalidTokenError:
            logger.warning("Rejected invalid token")
            return None

        subject = payload.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError):
            logger.warning("Token subject is not a person id", subject=subject)
            return None
