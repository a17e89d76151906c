"""FastAPI dependencies authenticating callers and enforcing roles."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from ..errors import DataLayerError
from ..services.providers import get_profile_repository, get_token_verifier
from .models import AuthenticatedUser, UserRole
from .repository import ProfileRepository
from .tokens import AccessTokenVerifier, extract_bearer_token

logger = logging.getLogger("auth")


def get_current_user(
    authorization: Optional[str] = Header(None),
    verifier: AccessTokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser:
    token = extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    user = verifier.verify(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def require_role(role: UserRole) -> Callable[..., AuthenticatedUser]:
    """Build a dependency admitting only callers whose profile carries ``role``."""

    def dependency(
        current_user: AuthenticatedUser = Depends(get_current_user),
        profiles: ProfileRepository = Depends(get_profile_repository),
    ) -> AuthenticatedUser:
        try:
            current_role = profiles.get_role(current_user.id)
        except DataLayerError:
            logger.exception("Role lookup failed for user=%s", current_user.id)
            current_role = None

        if current_role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return current_user.model_copy(update={"role": current_role})

    return dependency


require_admin = require_role(UserRole.ADMIN)


def require_super_admin(
    current_user: AuthenticatedUser = Depends(require_admin),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> AuthenticatedUser:
    try:
        allowed = profiles.is_super_admin(current_user.id)
    except DataLayerError:
        logger.exception("Super-admin lookup failed for user=%s", current_user.id)
        allowed = False

    if not allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Super-admin required")
    return current_user
